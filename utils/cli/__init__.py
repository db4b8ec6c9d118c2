"""satgw command line interface."""
