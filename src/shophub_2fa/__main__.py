"""shophub-2fa CLI.

Usage:
    python -m shophub_2fa secret              # New Base32 secret
    python -m shophub_2fa url SECRET EMAIL    # Enrollment QR URL
    python -m shophub_2fa code SECRET         # Current code
    python -m shophub_2fa verify SECRET CODE  # Check a code
    python -m shophub_2fa status              # Effective settings
"""

from shophub_2fa.cli import main

main(prog_name="shophub-2fa")
