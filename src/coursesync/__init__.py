"""Course catalog synchronisation between learning providers and a destination catalog."""
