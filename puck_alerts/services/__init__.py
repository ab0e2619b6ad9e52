"""Event derivation, payload formatting and webhook delivery."""
