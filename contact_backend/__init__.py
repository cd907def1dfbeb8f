"""
Backend package for the website contact form.

This package provides a FastAPI application that accepts contact requests,
keeps them in an encrypted on-disk store with a retention window, and exposes
a small token-protected admin API for reviewing and erasing submissions.
"""
