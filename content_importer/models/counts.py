"""Run counters returned by each stage and summed by the importer."""

from dataclasses import asdict, dataclass, fields


@dataclass
class RunCounts:
    """Accumulator for a single import run."""

    files: int = 0
    assets: int = 0
    cleaned: int = 0
    conversions: int = 0
    persist: int = 0
    errors: int = 0

    def __add__(self, other: "RunCounts") -> "RunCounts":
        if not isinstance(other, RunCounts):
            return NotImplemented
        return RunCounts(
            **{
                f.name: getattr(self, f.name) + getattr(other, f.name)
                for f in fields(self)
            }
        )

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
