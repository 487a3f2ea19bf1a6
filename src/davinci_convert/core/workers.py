"""Worker count selection and host information."""

from __future__ import annotations

import logging
from typing import Any

import psutil

LOG = logging.getLogger(__name__)


def get_cpu_parallelism() -> int:
    """Number of logical CPUs, at least 1."""
    try:
        return psutil.cpu_count(logical=True) or 1
    except (OSError, AttributeError, ValueError) as e:
        LOG.warning("Failed to detect CPU count with psutil: %s. Using 1 worker.", e)
        return 1


def resolve_worker_count(configured_workers: int | None) -> int:
    """
    Get the number of parallel conversion workers.

    Args:
        configured_workers: The configured worker count, or None for auto-detection

    Returns:
        The configured count, or the available CPU parallelism when unset

    """
    if configured_workers is not None and configured_workers > 0:
        logical_cores = get_cpu_parallelism()
        if configured_workers > logical_cores:
            LOG.warning(
                "Using %d workers on %d logical cores; conversions will compete for CPU",
                configured_workers,
                logical_cores,
            )
        return configured_workers

    workers = get_cpu_parallelism()
    LOG.debug("Auto-detected %d workers", workers)
    return workers


def describe_system() -> dict[str, Any]:
    """Collect host facts for the info command."""
    try:
        memory = psutil.virtual_memory()
        return {
            "physical_cores": psutil.cpu_count(logical=False) or 1,
            "logical_cores": psutil.cpu_count(logical=True) or 1,
            "memory_total_gb": memory.total / (1024**3),
            "memory_percent": memory.percent,
        }
    except (OSError, AttributeError, ValueError) as e:
        LOG.warning("Failed to read system information: %s", e)
        return {}
