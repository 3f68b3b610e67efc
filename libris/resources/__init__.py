"""Bundled data files: blocked and disposable email domains, common passwords."""
