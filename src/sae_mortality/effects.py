"""Explicit bundles of design matrices and posterior draws.

A fitted sampler is usually queried by effect name (``beta``,
``district.structured``, ...).  Rather than reaching into a fitted
result object from inside the summarizer, the caller assembles a
:class:`PosteriorBundle` once and passes it in:

    bundle
    ├─ fixed_design   (N, P)
    ├─ fixed_draws    (S, P)
    └─ random_effects
       ├─ RandomEffectGroup("district")
       │   ├─ design                  (N, K_district)
       │   └─ draws["structured"]     (S, K_district)
       │      draws["unstructured"]   (S, K_district)
       └─ RandomEffectGroup("cause_district_rw")
           ├─ design                  (N, K)
           └─ draws["rw"]             (S, K)

Bundles only hold references; column alignment and shape checks run
in :mod:`.predict` so that every failure names the offending group.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import pandas as pd

from ._compat import _ensure_matrix_df
from .errors import MissingDataError


@dataclass(frozen=True)
class RandomEffectGroup:
    """One random-effect group and its draw blocks.

    Args:
        name: Group name (e.g. ``"district"``).
        design: Indicator design ``(N, K_g)``.
        draws: Block name → draw matrix ``(S, K_g)``.  Blocks are
            summed, e.g. the structured and unstructured parts of a
            BYM2 spatial effect.  A single matrix is stored under the
            group's own name.

    Raises:
        MissingDataError: If no draw block is supplied.
    """

    name: str
    design: pd.DataFrame
    draws: Mapping[str, pd.DataFrame] = field(default_factory=dict)

    def __post_init__(self) -> None:
        draws = self.draws
        if draws is None:
            draws = {}
        elif not isinstance(draws, Mapping):
            draws = {self.name: draws}
        if not draws:
            raise MissingDataError(
                f"Random-effect group '{self.name}' has no posterior draw blocks.",
                name=self.name,
            )
        object.__setattr__(
            self, "design", _ensure_matrix_df(self.design, name=f"{self.name} design")
        )
        object.__setattr__(
            self,
            "draws",
            {
                block: _ensure_matrix_df(mat, name=f"{self.name}.{block} draws")
                for block, mat in draws.items()
            },
        )

    @property
    def block_names(self) -> list[str]:
        return list(self.draws)


@dataclass(frozen=True)
class PosteriorBundle:
    """Fixed-effect design and draws plus any random-effect groups.

    Raises:
        MissingDataError: If ``fixed_draws`` is ``None``.
        ValueError: If two random-effect groups share a name.
    """

    fixed_design: pd.DataFrame
    fixed_draws: pd.DataFrame | None
    random_effects: Sequence[RandomEffectGroup] = ()

    def __post_init__(self) -> None:
        if self.fixed_draws is None:
            raise MissingDataError(
                "Fixed-effect posterior draws are absent.", name="fixed"
            )
        if self.fixed_design is None:
            raise MissingDataError("Fixed-effect design is absent.", name="fixed")
        object.__setattr__(
            self, "fixed_design", _ensure_matrix_df(self.fixed_design, name="fixed design")
        )
        object.__setattr__(
            self, "fixed_draws", _ensure_matrix_df(self.fixed_draws, name="fixed draws")
        )
        groups = tuple(self.random_effects)
        names = [g.name for g in groups]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate random-effect group names: {dupes}")
        object.__setattr__(self, "random_effects", groups)

    @property
    def n_obs(self) -> int:
        return int(self.fixed_design.shape[0])

    @property
    def n_draws(self) -> int:
        return int(self.fixed_draws.shape[0])

    @property
    def group_names(self) -> list[str]:
        return [g.name for g in self.random_effects]

    def group(self, name: str) -> RandomEffectGroup:
        """Return the random-effect group called *name*.

        Raises:
            MissingDataError: If the bundle has no such group.
        """
        for g in self.random_effects:
            if g.name == name:
                return g
        raise MissingDataError(
            f"Random-effect group '{name}' is absent; available groups: "
            f"{self.group_names}",
            name=name,
        )


def bundle_from_sampler(
    draws: Mapping[str, pd.DataFrame],
    fixed_design: pd.DataFrame,
    *,
    fixed_name: str = "beta",
    random_designs: Mapping[str, pd.DataFrame] | None = None,
    blocks: Mapping[str, Sequence[str]] | None = None,
) -> PosteriorBundle:
    """Assemble a :class:`PosteriorBundle` from named sampler output.

    Args:
        draws: Effect name → draw matrix, as exported by the sampler.
            Multi-block random effects use ``"<group>.<block>"`` keys
            (e.g. ``"district.structured"``).
        fixed_design: Fixed-effect design ``(N, P)``.
        fixed_name: Key of the fixed-effect draws in *draws*.
        random_designs: Group name → indicator design.
        blocks: Group name → block names to pull.  When omitted a
            group uses ``draws[group]`` if present, otherwise every
            ``"<group>.*"`` key.

    Raises:
        MissingDataError: If the fixed draws, or any requested group
            or block, is absent from *draws*.
    """
    if fixed_name not in draws:
        raise MissingDataError(
            f"Fixed-effect draws '{fixed_name}' are absent from the sampler "
            f"output; available effects: {sorted(draws)}",
            name=fixed_name,
        )

    groups: list[RandomEffectGroup] = []
    for name, design in (random_designs or {}).items():
        wanted = None if blocks is None else blocks.get(name)
        if wanted is not None:
            keys = {b: f"{name}.{b}" for b in wanted}
            absent = [k for k in keys.values() if k not in draws]
            if absent:
                raise MissingDataError(
                    f"Random-effect group '{name}': draw blocks {absent} are "
                    f"absent from the sampler output.",
                    name=absent[0],
                )
        elif name in draws:
            keys = {name: name}
        else:
            prefix = f"{name}."
            keys = {k[len(prefix):]: k for k in draws if k.startswith(prefix)}
            if not keys:
                raise MissingDataError(
                    f"Random-effect group '{name}' is absent from the sampler "
                    f"output; available effects: {sorted(draws)}",
                    name=name,
                )
        groups.append(
            RandomEffectGroup(
                name=name,
                design=design,
                draws={block: draws[key] for block, key in keys.items()},
            )
        )

    return PosteriorBundle(
        fixed_design=fixed_design,
        fixed_draws=draws[fixed_name],
        random_effects=groups,
    )
