"""Shared infrastructure: ошибки и логирование."""
