# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Read-only run configuration shared by all workers."""

from dataclasses import dataclass, fields

from ..errors import ConfigurationError

EVENT_SOURCES = ('moves', 'pseudomoves')
DEGENERATE_POLICIES = ('skip', 'constant')


@dataclass(frozen=True)
class PipelineConfig:
    winsor_lower: float = 0.005
    winsor_upper: float = 0.995
    event_source: str = 'moves'
    gap_threshold: int = 3        # uncalibrated; see DESIGN.md
    max_overflow_events: int = 1
    chunk_size: int = 100
    gaf_size: int = 100
    degenerate_policy: str = 'skip'
    zscore_lag: int = 100
    zscore_threshold: float = 3.5
    zscore_influence: float = 0.5

    @classmethod
    def from_opts(cls, opts):
        """Build from a parsed options object, ignoring unrelated attributes."""
        kwargs = {}
        for f in fields(cls):
            value = getattr(opts, f.name, None)
            if value is not None:
                kwargs[f.name] = value
        return cls(**kwargs).validate()

    def validate(self):
        """Check every field; returns ``self`` so calls can be chained.

        Raises:
            ConfigurationError: on the first invalid value.
        """
        if not 0 <= self.winsor_lower < self.winsor_upper <= 1:
            raise ConfigurationError(
                f'winsorizing quantiles must satisfy 0 <= lower < upper <= 1 '
                f'(got {self.winsor_lower}, {self.winsor_upper})')
        if self.event_source not in EVENT_SOURCES:
            raise ConfigurationError(
                f"event_source must be one of {EVENT_SOURCES}, got '{self.event_source}'")
        if self.degenerate_policy not in DEGENERATE_POLICIES:
            raise ConfigurationError(
                f'degenerate_policy must be one of {DEGENERATE_POLICIES}, '
                f"got '{self.degenerate_policy}'")
        for name in ('gap_threshold', 'chunk_size', 'gaf_size', 'zscore_lag'):
            if getattr(self, name) < 1:
                raise ConfigurationError(f'{name} must be a positive integer')
        if self.max_overflow_events < 0:
            raise ConfigurationError('max_overflow_events must be >= 0')
        if self.zscore_threshold <= 0:
            raise ConfigurationError('zscore_threshold must be positive')
        if not 0 <= self.zscore_influence <= 1:
            raise ConfigurationError('zscore_influence must be within [0, 1]')
        return self
