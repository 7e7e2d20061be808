"""PiMonitor command line and HTTP presenter."""
