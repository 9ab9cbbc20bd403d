"""Command line entry points for the Azure DevOps issue counter."""
