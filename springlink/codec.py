# springlink/codec.py
"""
SERIALIZATION: Checkpoint / Distribution Record of a Spring Element
===================================================================

A packed element is a JSON document validated by `SpringRecord`. It carries
every DEFINING parameter, never the trial/committed response; that is
recomputed by the next update() after the copy is bound to its nodes.

    data = pack(element, commit_tag=12)
    copy = unpack(data, commit_tag=12)   # DecodeError if the tag differs
    copy.set_domain(domain)              # same Tgl, Tlb, kb as the original

Floats are written with their shortest round-trip representation, so the
copy rebuilds bit-identical matrices.

Every field is required (optional values are written as null) and unknown
fields are rejected, so a record from another format version or a truncated
payload fails loudly instead of producing a half-populated element.
"""

from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CONFIG
from .elements import SpringElement
from .errors import ConfigurationError, DecodeError, GeometryError


class SpringRecord(BaseModel):
    """Wire layout of one spring element."""
    model_config = ConfigDict(extra="forbid")

    version: int
    commit_tag: int
    class_type: Literal["LinearElasticSpring"]
    tag: int
    ndm: int = Field(ge=1, le=3)
    nodes: Tuple[int, int]
    dof_per_node: Optional[int]
    directions: List[int] = Field(min_length=1)
    stiffness: List[List[float]]
    damping: Optional[List[List[float]]]
    x: Optional[Tuple[float, float, float]]
    y: Optional[Tuple[float, float, float]]
    moment_ratios: Optional[Tuple[float, float, float, float]]
    add_rayleigh: bool
    rayleigh: Tuple[float, float, float, float]   # alpha_m, beta_k, beta_k0, beta_kc


def to_record(element: SpringElement, commit_tag: int = 0) -> SpringRecord:
    return SpringRecord(
        version=CONFIG.codec_version,
        commit_tag=int(commit_tag),
        class_type=element.class_type,
        tag=element.tag,
        ndm=element.ndm,
        nodes=element.node_ids,
        dof_per_node=element.dof_per_node,
        directions=list(element.directions),
        stiffness=element.kb.tolist(),
        damping=None if element.cb is None else element.cb.tolist(),
        x=element.x,
        y=element.y,
        moment_ratios=None if element.mratio is None else tuple(element.mratio.tolist()),
        add_rayleigh=element.add_rayleigh,
        rayleigh=(element.alpha_m, element.beta_k, element.beta_k0, element.beta_kc),
    )


def from_record(record: SpringRecord) -> SpringElement:
    """
    Rebuild an element from a validated record.

    Raises:
        DecodeError: If the parameters no longer form a valid element
    """
    try:
        # partial moment ratios were already reported when the element was built
        element = SpringElement(
            record.tag,
            record.ndm,
            record.nodes[0],
            record.nodes[1],
            record.directions,
            record.stiffness,
            y=record.y,
            x=record.x,
            moment_ratios=record.moment_ratios,
            add_rayleigh=record.add_rayleigh,
            damping=record.damping,
            dof_per_node=record.dof_per_node,
            warn=False,
        )
    except (ConfigurationError, GeometryError) as e:
        raise DecodeError(f"Record for element {record.tag} is inconsistent: {e}") from e

    element.set_rayleigh_damping_factors(*record.rayleigh)
    return element


def pack(element: SpringElement, commit_tag: int = 0) -> bytes:
    """Serialize the defining parameters of an element."""
    return to_record(element, commit_tag).model_dump_json().encode("utf-8")


def unpack(data: Union[bytes, bytearray, str], commit_tag: Optional[int] = None) -> SpringElement:
    """
    Reconstruct an element from `pack` output.

    Args:
        data: Packed record
        commit_tag: Expected commit tag; None accepts any tag

    Raises:
        DecodeError: Malformed payload, missing or unknown fields, wrong
            format version, stale commit tag or inconsistent parameters
    """
    if not isinstance(data, (bytes, bytearray, str)):
        raise DecodeError(f"Expected bytes or str, got {type(data).__name__}")
    try:
        record = SpringRecord.model_validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"Malformed spring record ({e.error_count()} error(s)): {e}") from e

    if record.version != CONFIG.codec_version:
        raise DecodeError(
            f"Unsupported record version {record.version} (expected {CONFIG.codec_version})"
        )
    if commit_tag is not None and record.commit_tag != commit_tag:
        raise DecodeError(
            f"Stale record for element {record.tag}: commit tag {record.commit_tag}, expected {commit_tag}"
        )
    return from_record(record)
