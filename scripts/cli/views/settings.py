"""CLI view: effective settings."""

from dataclasses import asdict


def show_settings(settings, source):
    W = 60
    print()
    print("=" * W)
    print("  SETTINGS".center(W))
    print("=" * W)
    for key, value in asdict(settings).items():
        shown = "-" if value is None else value
        print(f"  {key:<24} {shown}")
    print(f"\n  Settings file: {source}")
    print()
