from bisect import bisect_left
from typing import Mapping, Optional, Tuple
from stepinfra.config import LAMBDA_CPU_RATIO


class ProportionalCpuResolver:
    """Maps a memory allocation to the vCPU share the provider grants for it."""

    def __init__(self, table: Optional[Mapping[int, float]] = None):
        pairs = sorted((table if table is not None else LAMBDA_CPU_RATIO).items())
        if not pairs:
            raise ValueError("calibration table must not be empty")
        self._points: Tuple[Tuple[int, float], ...] = tuple(pairs)
        self._ram: Tuple[int, ...] = tuple(ram for ram, _ in pairs)

    def resolve(self, ram_mb: float) -> float:
        """
        Expected vCPU for ``ram_mb``.

        Exact tiers return their value, values between two tiers are linearly
        interpolated and values outside the table are clamped to its ends.
        """
        idx = bisect_left(self._ram, ram_mb)

        if idx < len(self._ram) and self._ram[idx] == ram_mb:
            return self._points[idx][1]
        if idx == 0:
            return self._points[0][1]
        if idx == len(self._ram):
            return self._points[-1][1]

        low_ram, low_cpu = self._points[idx - 1]
        high_ram, high_cpu = self._points[idx]
        ratio = (ram_mb - low_ram) / (high_ram - low_ram)
        return low_cpu + (high_cpu - low_cpu) * ratio


_default_resolver = ProportionalCpuResolver()


def get_proportional_cpu(ram_mb: float) -> float:
    return _default_resolver.resolve(ram_mb)
