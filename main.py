#!/usr/bin/env python3
"""
Dink Shuffle
Entry point for the mixer round generator.
"""

if __name__ == "__main__":
    from dink_shuffle.cli import main

    main()
