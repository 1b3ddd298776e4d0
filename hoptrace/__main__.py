"""
hoptrace - Parallel UDP Traceroute

Entry point for running as a module:
    python -m hoptrace <host>
"""

from .cli import main

if __name__ == '__main__':
    main()
