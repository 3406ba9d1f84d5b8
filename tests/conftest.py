"""Shared pytest setup: render previews headless."""

import matplotlib

matplotlib.use("Agg")
