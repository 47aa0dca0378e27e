#!/usr/bin/env python3
"""
Command-line entry point for the label unsubscriber.

    python main.py run --email user@gmail.com
"""

from label_unsubscriber.cli.main import main


if __name__ == '__main__':
    main()
