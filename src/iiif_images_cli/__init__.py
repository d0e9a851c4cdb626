"""Command line and MCP tool server for IIIF image resolution."""
