"""Command-line flags read as a nested configuration mapping."""