import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Self
from uuid import UUID

import tomli_w
from pydantic import BaseModel, ConfigDict, NonNegativeInt, model_validator

logger = logging.getLogger(__name__)

SampleValue = bool | int | float | str


class SampleSet(BaseModel):
    """A named sample sequence produced for one uncertain value.

    Attributes:
        name: Label used as the TOML table name.
        identity: Identity of the sampled handle.
        count: Number of samples requested.
        values: The produced samples, in sample-index order.

    """

    model_config = ConfigDict(frozen=True)

    name: str
    identity: UUID
    count: NonNegativeInt
    values: tuple[SampleValue, ...]

    @model_validator(mode="after")
    def _check_length(self) -> Self:
        if len(self.values) != self.count:
            msg = f"Sample set '{self.name}' has {len(self.values)} values but count is {self.count}"
            raise ValueError(msg)
        return self


def samples_to_dict(sample_sets: Iterable[SampleSet]) -> dict[str, Any]:
    """Convert sample sets to a TOML-ready nested dictionary.

    Returns:
        A dictionary of the form {"samples": {name: {...}}}.

    Raises:
        ValueError: If two sample sets share a name.

    """
    tables: dict[str, Any] = {}
    for sample_set in sample_sets:
        if sample_set.name in tables:
            msg = f"Duplicate sample set name: {sample_set.name}"
            raise ValueError(msg)
        data = sample_set.model_dump(mode="json", exclude={"name"})
        tables[sample_set.name] = data
    return {"samples": tables}


def export_samples_to_toml(sample_sets: Iterable[SampleSet], output_path: Path | str) -> None:
    """Write sample sets to a TOML file as [samples.<name>] tables."""
    toml_data = samples_to_dict(sample_sets)

    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(toml_data, f)

    logger.debug(f"Exported {len(toml_data['samples'])} sample set(s) to {output_path}")


def load_samples_from_toml(input_path: Path | str) -> dict[str, SampleSet]:
    """Load sample sets written by export_samples_to_toml.

    Returns:
        Mapping from sample set name to the validated SampleSet.

    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        toml_contents = tomllib.load(f)

    sample_sets = {
        name: SampleSet.model_validate({"name": name, **table})
        for name, table in toml_contents.get("samples", {}).items()
    }
    logger.debug(f"Loaded {len(sample_sets)} sample set(s) from {input_path}")
    return sample_sets
