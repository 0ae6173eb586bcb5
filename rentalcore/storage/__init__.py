"""Storage package - data source interfaces."""
