#!/usr/bin/env python3
"""
Main execution module for the onboarding heuristics tool
"""

from onboard_heuristics.cli.commands import main

if __name__ == "__main__":
    main()
