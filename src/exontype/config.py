"""Configuration management for exontype.

This module holds the settings that control a classification run:
which label sets to compute, whether to add the summarised exon type,
and how the aggregation stage is parallelised.

Example:
    >>> from exontype.config import Config
    >>> config = Config.from_dict({"classifier": {"sets": ["from", "to"]}})
    >>> config.classifier.sets
    ('from', 'to')
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import attrs

from exontype.errors import InvalidConfiguration

# =============================================================================
# Default Configuration Values
# =============================================================================

SET_FROM = "from"
SET_TO = "to"
SET_OVERLAP = "overlap"

# Label sets in reporting order
VALID_SETS = (SET_FROM, SET_TO, SET_OVERLAP)

DEFAULT_SETS = VALID_SETS

# Parallel processing defaults
DEFAULT_N_WORKERS = 1
DEFAULT_BACKEND = "threads"
DEFAULT_BATCH_SIZE = 1000  # Queries per aggregation task

VALID_BACKENDS = ("serial", "threads", "processes")


def normalize_sets(sets: str | Iterable[str]) -> tuple[str, ...]:
    """Validate a set selection and return it in from/to/overlap order.

    Args:
        sets: A single set name or an iterable of set names.

    Returns:
        Tuple of unique set names.

    Raises:
        InvalidConfiguration: If the selection is empty or contains
            an unknown name.
    """
    if isinstance(sets, str):
        sets = (sets,)
    requested = set(sets)

    unknown = requested - set(VALID_SETS)
    if unknown:
        raise InvalidConfiguration(
            f"Unknown set(s) {sorted(unknown)}; expected any of {list(VALID_SETS)}"
        )
    if not requested:
        raise InvalidConfiguration(
            f"At least one of {list(VALID_SETS)} must be selected"
        )

    return tuple(name for name in VALID_SETS if name in requested)


def _serialize_value(instance: Any, field: attrs.Attribute, value: Any) -> Any:
    """Write tuples as lists so dictionaries hold plain data."""
    if isinstance(value, tuple):
        return list(value)
    return value


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ParallelConfig:
    """Configuration for the aggregation stage.

    Attributes:
        n_workers: Number of parallel workers (1 = serial).
        backend: Execution backend (serial, threads or processes).
        batch_size: Number of queries per aggregation task.
    """

    n_workers: int = DEFAULT_N_WORKERS
    backend: str = DEFAULT_BACKEND
    batch_size: int = DEFAULT_BATCH_SIZE

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            InvalidConfiguration: If any value is out of range.
        """
        if self.n_workers < 1:
            raise InvalidConfiguration(f"n_workers must be >= 1, got {self.n_workers}")
        if self.batch_size < 1:
            raise InvalidConfiguration(f"batch_size must be >= 1, got {self.batch_size}")
        if self.backend not in VALID_BACKENDS:
            raise InvalidConfiguration(
                f"Unknown backend '{self.backend}'; expected one of {list(VALID_BACKENDS)}"
            )


@attrs.define
class ClassifierConfig:
    """Configuration for overlap-type classification.

    Attributes:
        sets: Label sets to compute (from, to, overlap).
        summarize: Add the summarised exon type of the overlap label.
        include_components: Also report the feature types and broad
            transcript types behind each label.
        strand_aware: Only count overlaps on compatible strands.
    """

    sets: tuple[str, ...] = attrs.field(
        default=DEFAULT_SETS,
        converter=lambda value: (value,) if isinstance(value, str) else tuple(value),
    )
    summarize: bool = False
    include_components: bool = False
    strand_aware: bool = False

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            InvalidConfiguration: If the set selection is invalid, or
                summarisation is requested without the overlap set.
        """
        self.sets = normalize_sets(self.sets)
        if self.summarize and SET_OVERLAP not in self.sets:
            raise InvalidConfiguration(
                "summarize requires the 'overlap' set to be selected"
            )


@attrs.define
class Config:
    """Main configuration container for exontype.

    Attributes:
        classifier: Classification configuration.
        parallel: Parallel processing configuration.
    """

    classifier: ClassifierConfig = attrs.Factory(ClassifierConfig)
    parallel: ParallelConfig = attrs.Factory(ParallelConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None = None) -> Config:
        """Build configuration from a nested dictionary.

        Args:
            data: Mapping with optional "classifier" and "parallel"
                sections. Missing keys take default values.

        Returns:
            Validated configuration object.

        Raises:
            InvalidConfiguration: If a section has unknown keys or
                invalid values.
        """
        data = data or {}
        unknown = set(data) - {"classifier", "parallel"}
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration section(s): {sorted(unknown)}")

        try:
            config = cls(
                classifier=ClassifierConfig(**data.get("classifier", {})),
                parallel=ParallelConfig(**data.get("parallel", {})),
            )
        except TypeError as e:
            raise InvalidConfiguration(str(e)) from e

        config.validate()
        return config

    def validate(self) -> None:
        """Validate all sections."""
        self.classifier.validate()
        self.parallel.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration, with tuples
            written as lists.
        """
        return attrs.asdict(self, value_serializer=_serialize_value)
