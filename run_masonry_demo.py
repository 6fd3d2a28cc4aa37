#!/usr/bin/env python3
"""
Masonry grid demo launcher.

Run this from the project root to open the demo window.
"""

if __name__ == '__main__':
    from masonry_grid.run_demo import run_demo
    run_demo()
