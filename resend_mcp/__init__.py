"""Resend email tools exposed over the Model Context Protocol."""
