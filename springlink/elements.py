# springlink/elements.py
"""
LINEAR ELASTIC SPRING: Two-Node Element with a Basic-System Stiffness
=====================================================================

A spring joining two nodes. The user gives the stiffness only for the
directions it acts in (the BASIC system), e.g. axial + shear in 2D:

    directions = [0, 1]
    stiffness  = [[1000.0,    0.0],
                  [   0.0, 2000.0]]

and the element takes care of everything else:

    bind        set_domain(domain)          classify layout, build Tgl / Tlb
    each step   update()                    ug -> ul -> ub -> qb
                get_tangent_stiff()         Tgl.T Tlb.T kb Tlb Tgl (+ P-Delta)
                get_resisting_force()       Tgl.T (Tlb.T qb + pΔ) - load
    accept      commit_state()
    retry       revert_to_last_commit()
    restart     revert_to_start()

The stiffness is constant, so the element never has to check convergence
and commit_state() always succeeds.

RESPONSE STATES:
----------------
    INITIAL   --update-->  TRIAL  --commit_state-->  COMMITTED
    TRIAL     --revert_to_last_commit-->  trial = committed
    any       --revert_to_start-->  INITIAL

Everything computed per call lives in local numpy arrays, so distinct
elements can be evaluated in parallel.
"""

import logging
import numpy as np
from typing import Callable, Dict, Optional, Sequence, Tuple

from .config import CONFIG
from .errors import ConfigurationError, GeometryError, UnknownResponseError
from .kernel.basic import basic_damping, basic_stiffness
from .kernel.dof import DOFLayout, DOFManager, check_directions, layout_for_nodes
from .kernel.pdelta import check_moment_ratios, pdelta_forces, pdelta_stiffness
from .kernel.transform import Transformations, build_transformations
from .state import SpringState, StatePhase

_logger = logging.getLogger(__name__)


def _widest_layout(ndm: int) -> DOFLayout:
    """Layout with the most DOFs for a dimension (bounds the direction codes)."""
    candidates = [layout for layout in DOFLayout if layout.ndm == ndm]
    if not candidates:
        raise ConfigurationError(f"Dimension must be 1, 2 or 3, got {ndm}")
    return max(candidates, key=lambda layout: layout.num_dof)


def _orientation_vector(v, name: str) -> Optional[Tuple[float, float, float]]:
    if v is None:
        return None
    arr = np.asarray(v, dtype=float).ravel()
    if arr.size != 3 or not np.all(np.isfinite(arr)):
        raise ConfigurationError(f"Orientation vector {name} must have 3 finite components, got {arr.tolist()}")
    return tuple(float(c) for c in arr)


class SpringElement:
    """
    Linear elastic two-node spring.

    Args:
        tag: Element identifier
        ndm: Spatial dimension (1, 2 or 3)
        node_i, node_j: Ids of the end nodes (resolved through the domain)
        directions: Basic direction codes (local DOF indices at a node)
        stiffness: Basic stiffness, only the upper triangle is read
        y: Local y orientation vector (3 components), optional
        x: Local x orientation vector (3 components), optional
        moment_ratios: [rMy1, rMy2, rMz1, rMz2] enabling P-Delta, optional
        add_rayleigh: Include Rayleigh damping in damping matrix and forces
        damping: Basic damping, only the upper triangle is read, optional
        dof_per_node: Fix the nodal DOF count now instead of at bind time
        warn: Emit ConfigurationWarning for partial moment-ratio sums

    Raises:
        ConfigurationError: For any invalid defining parameter
    """

    class_type = "LinearElasticSpring"

    def __init__(
        self,
        tag: int,
        ndm: int,
        node_i: int,
        node_j: int,
        directions: Sequence[int],
        stiffness,
        y: Optional[Sequence[float]] = None,
        x: Optional[Sequence[float]] = None,
        moment_ratios: Optional[Sequence[float]] = None,
        add_rayleigh: bool = False,
        damping=None,
        dof_per_node: Optional[int] = None,
        warn: bool = True,
    ):
        self.tag = int(tag)
        self.ndm = int(ndm)
        widest = _widest_layout(self.ndm)

        self.layout: Optional[DOFLayout] = None
        if dof_per_node is not None:
            self.layout = layout_for_nodes(self.ndm, dof_per_node)
        self.directions = tuple(check_directions(self.layout or widest, directions))
        self.dof_per_node = None if dof_per_node is None else int(dof_per_node)

        self.node_ids = (int(node_i), int(node_j))
        self.kb = basic_stiffness(stiffness, self.num_dir)
        self.cb = basic_damping(damping, self.num_dir)
        self.x = _orientation_vector(x, "x")
        self.y = _orientation_vector(y, "y")
        self.mratio = check_moment_ratios(moment_ratios, warn=warn)
        self.add_rayleigh = bool(add_rayleigh)

        self.alpha_m = CONFIG.default_alpha_m
        self.beta_k = CONFIG.default_beta_k
        self.beta_k0 = CONFIG.default_beta_k0
        self.beta_kc = CONFIG.default_beta_kc

        self._domain = None
        self.geometry: Optional[Transformations] = None
        self._trial: Optional[SpringState] = None
        self._committed: Optional[SpringState] = None
        self._load: Optional[np.ndarray] = None
        self._has_commit = False
        self.phase = StatePhase.INITIAL

    # ------------------------------------------------------------------
    # connectivity
    # ------------------------------------------------------------------

    @property
    def num_dir(self) -> int:
        return len(self.directions)

    @property
    def is_bound(self) -> bool:
        return self.geometry is not None

    @property
    def pdelta_active(self) -> bool:
        return self.mratio is not None

    @property
    def length(self) -> float:
        return self._require_bound().length

    def get_num_external_nodes(self) -> int:
        return 2

    def get_external_nodes(self) -> Tuple[int, int]:
        return self.node_ids

    def get_num_dof(self) -> int:
        if self.layout is None:
            raise GeometryError(f"Element {self.tag} is not bound to a domain; DOF count unknown")
        return self.layout.num_dof

    def set_domain(self, domain) -> None:
        """
        Bind the element to its nodes and run the geometry pass.

        The element is only modified once every check has passed, so a
        failed bind leaves it unbound.

        Raises:
            ConfigurationError: Missing nodes, unequal or unsupported nodal
                DOF counts, or direction codes outside the layout
            GeometryError: Node dimension mismatch or degenerate orientation
        """
        try:
            nodes = [domain.get_node(nid) for nid in self.node_ids]
        except KeyError as e:
            raise ConfigurationError(f"Element {self.tag}: node {e} does not exist in the domain") from None

        for node in nodes:
            if len(node.coords) != self.ndm:
                raise GeometryError(
                    f"Element {self.tag} is {self.ndm}D but node {node.id} has "
                    f"{len(node.coords)} coordinates"
                )
        ndf_i, ndf_j = nodes[0].ndf, nodes[1].ndf
        if ndf_i != ndf_j:
            raise ConfigurationError(
                f"Element {self.tag}: nodes have different DOF counts ({ndf_i} and {ndf_j})"
            )
        if self.dof_per_node is not None and ndf_i != self.dof_per_node:
            raise ConfigurationError(
                f"Element {self.tag} was defined for {self.dof_per_node} DOF/node, nodes carry {ndf_i}"
            )

        layout = layout_for_nodes(self.ndm, ndf_i)
        check_directions(layout, self.directions)
        geometry = build_transformations(
            layout, self.directions, nodes[0].coords, nodes[1].coords,
            x=self.x, y=self.y, tag=self.tag,
        )

        self._domain = domain
        self.layout = layout
        self.geometry = geometry
        self._trial = SpringState.zeros(self.num_dir, layout.num_dof)
        self._committed = SpringState.zeros(self.num_dir, layout.num_dof)
        self._load = np.zeros(layout.num_dof, dtype=float)
        self._has_commit = False
        self.phase = StatePhase.INITIAL
        _logger.debug("Element %d bound: layout=%s, L=%.6g", self.tag, layout.name, geometry.length)

    def _require_bound(self) -> Transformations:
        if self.geometry is None:
            raise GeometryError(f"Element {self.tag} is not bound to a domain")
        return self.geometry

    def _gather(self, accessor: Callable[[int], np.ndarray]) -> np.ndarray:
        """Collect a nodal quantity of both nodes into one element vector."""
        dof = DOFManager(self.layout.dof_per_node)
        out = np.zeros(self.layout.num_dof, dtype=float)
        for slot, nid in enumerate(self.node_ids):
            out[dof.node_dofs(slot)] = accessor(nid)
        return out

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    def update(self) -> int:
        """
        Recompute the trial state from the nodes' trial response.

        Returns:
            0 on success, -1 if the element is unbound or a node no longer
            resolves in the domain
        """
        if self.geometry is None:
            _logger.error("Element %d: update called before set_domain", self.tag)
            return -1
        try:
            ug = self._gather(self._domain.trial_disp)
            ugdot = self._gather(self._domain.trial_vel)
        except KeyError as e:
            _logger.warning("Element %d: node %s no longer resolves, update failed", self.tag, e)
            return -1

        Tgl = self.geometry.Tgl
        Tlb = self.geometry.Tlb

        ul = Tgl @ ug
        ub = Tlb @ ul
        ubdot = Tlb @ (Tgl @ ugdot)

        qb = self.kb @ ub
        if self.cb is not None:
            qb = qb + self.cb @ ubdot

        self._trial = SpringState(ub=ub, ubdot=ubdot, qb=qb, ul=ul)
        self.phase = StatePhase.TRIAL
        return 0

    def commit_state(self) -> int:
        self._require_bound()
        self._committed = self._trial.copy()
        self._has_commit = True
        self.phase = StatePhase.COMMITTED
        return 0

    def revert_to_last_commit(self) -> int:
        self._require_bound()
        self._trial = self._committed.copy()
        self.phase = StatePhase.COMMITTED if self._has_commit else StatePhase.INITIAL
        return 0

    def revert_to_start(self) -> int:
        layout = self.layout
        if self.geometry is not None:
            self._trial = SpringState.zeros(self.num_dir, layout.num_dof)
            self._committed = SpringState.zeros(self.num_dir, layout.num_dof)
            self._load = np.zeros(layout.num_dof, dtype=float)
        self._has_commit = False
        self.phase = StatePhase.INITIAL
        return 0

    @property
    def trial_state(self) -> SpringState:
        self._require_bound()
        return self._trial.copy()

    @property
    def committed_state(self) -> SpringState:
        self._require_bound()
        return self._committed.copy()

    # ------------------------------------------------------------------
    # stiffness, damping, mass
    # ------------------------------------------------------------------

    def _local_stiffness(self, qb: Optional[np.ndarray]) -> np.ndarray:
        """Local stiffness; qb=None skips the P-Delta term."""
        geometry = self._require_bound()
        kl = geometry.Tlb.T @ self.kb @ geometry.Tlb
        if qb is not None and self.mratio is not None:
            kl = kl + pdelta_stiffness(self.layout, self.directions, self.mratio, qb, geometry.length)
        return kl

    def _to_global(self, kl: np.ndarray) -> np.ndarray:
        Tgl = self.geometry.Tgl
        return Tgl.T @ kl @ Tgl

    def get_tangent_stiff(self) -> np.ndarray:
        """Global stiffness including the P-Delta term of the trial state."""
        self._require_bound()
        return self._to_global(self._local_stiffness(self._trial.qb))

    def get_initial_stiff(self) -> np.ndarray:
        """Global stiffness from kb alone."""
        self._require_bound()
        return self._to_global(self._local_stiffness(None))

    def get_committed_stiff(self) -> np.ndarray:
        self._require_bound()
        return self._to_global(self._local_stiffness(self._committed.qb))

    def get_mass(self) -> np.ndarray:
        """The spring is massless."""
        n = self.get_num_dof()
        return np.zeros((n, n), dtype=float)

    def set_rayleigh_damping_factors(
        self,
        alpha_m: float = 0.0,
        beta_k: float = 0.0,
        beta_k0: float = 0.0,
        beta_kc: float = 0.0,
    ) -> int:
        self.alpha_m = float(alpha_m)
        self.beta_k = float(beta_k)
        self.beta_k0 = float(beta_k0)
        self.beta_kc = float(beta_kc)
        return 0

    def _rayleigh_damp(self) -> np.ndarray:
        # alpha_m multiplies the (zero) mass matrix
        n = self.get_num_dof()
        C = np.zeros((n, n), dtype=float)
        if self.beta_k != 0.0:
            C += self.beta_k * self.get_tangent_stiff()
        if self.beta_k0 != 0.0:
            C += self.beta_k0 * self.get_initial_stiff()
        if self.beta_kc != 0.0:
            C += self.beta_kc * self.get_committed_stiff()
        return C

    def get_damp(self) -> np.ndarray:
        """
        Global damping matrix.

        Rayleigh part (when add_rayleigh is set) plus the basic damping
        matrix mapped through the transformation chain.
        """
        geometry = self._require_bound()
        n = self.layout.num_dof
        C = np.zeros((n, n), dtype=float)
        if self.add_rayleigh:
            C += self._rayleigh_damp()
        if self.cb is not None:
            C += self._to_global(geometry.Tlb.T @ self.cb @ geometry.Tlb)
        return C

    # ------------------------------------------------------------------
    # loads and forces
    # ------------------------------------------------------------------

    def zero_load(self) -> None:
        self._require_bound()
        self._load[:] = 0.0

    def add_load(self, load: Sequence[float], load_factor: float = 1.0) -> int:
        """
        Accumulate an element load given as a global element vector.
        """
        self._require_bound()
        p = np.asarray(load, dtype=float).ravel()
        if p.size != self.layout.num_dof:
            raise ConfigurationError(
                f"Element {self.tag}: load must have {self.layout.num_dof} components, got {p.size}"
            )
        self._load += load_factor * p
        return 0

    def add_inertia_load_to_unbalance(self, accel: Sequence[float]) -> int:
        # no mass, nothing to add
        return 0

    def _local_force(self) -> np.ndarray:
        geometry = self._require_bound()
        ql = geometry.Tlb.T @ self._trial.qb
        if self.mratio is not None:
            ql = ql + pdelta_forces(
                self.layout, self.directions, self.mratio,
                self._trial.qb, self._trial.ul, geometry.length,
            )
        return ql

    def get_resisting_force(self) -> np.ndarray:
        """
        Global resisting force: Tgl.T (Tlb.T qb + pΔ) minus the element load.
        """
        ql = self._local_force()
        return self.geometry.Tgl.T @ ql - self._load

    def get_resisting_force_inc_inertia(self) -> np.ndarray:
        """Resisting force plus Rayleigh damping forces C_R @ ugdot."""
        p = self.get_resisting_force()
        if self.add_rayleigh and any(
            f != 0.0 for f in (self.alpha_m, self.beta_k, self.beta_k0, self.beta_kc)
        ):
            ugdot = self._gather(self._domain.trial_vel)
            p = p + self._rayleigh_damp() @ ugdot
        return p

    # ------------------------------------------------------------------
    # responses
    # ------------------------------------------------------------------

    def _response_table(self) -> Dict[str, Callable[[], np.ndarray]]:
        global_force = self.get_resisting_force
        local_force = self._local_force
        basic_force = lambda: self._trial.qb.copy()
        basic_defo = lambda: self._trial.ub.copy()
        return {
            'force': global_force,
            'globalForce': global_force,
            'globalForces': global_force,
            'localForce': local_force,
            'localForces': local_force,
            'basicForce': basic_force,
            'basicForces': basic_force,
            'deformation': basic_defo,
            'deformations': basic_defo,
            'basicDeformation': basic_defo,
            'basicDeformations': basic_defo,
            'basicDisplacement': basic_defo,
            'basicDisplacements': basic_defo,
            'basicVelocity': lambda: self._trial.ubdot.copy(),
            'localDisplacement': lambda: self._trial.ul.copy(),
            'defoANDforce': lambda: np.concatenate([self._trial.ub, self._trial.qb]),
            'stiffness': lambda: self.kb.copy(),
            'globalStiffness': self.get_tangent_stiff,
            'damping': lambda: self.cb.copy() if self.cb is not None else np.zeros_like(self.kb),
            'transformation': lambda: self.geometry.trans.copy(),
        }

    def get_response(self, name: str) -> np.ndarray:
        """
        Look up an internal quantity by name.

        Raises:
            UnknownResponseError: If the name is not recognized
            GeometryError: If the element is not bound yet
        """
        table = self._response_table()
        if name not in table:
            raise UnknownResponseError(
                f"Element {self.tag}: unknown response '{name}' (known: {', '.join(sorted(table))})"
            )
        self._require_bound()
        return table[name]()

    # ------------------------------------------------------------------
    # checkpoint / distribution
    # ------------------------------------------------------------------

    def send_self(self, commit_tag: int = 0) -> bytes:
        from .codec import pack
        return pack(self, commit_tag)

    @classmethod
    def recv_self(cls, data: bytes, commit_tag: Optional[int] = None) -> "SpringElement":
        from .codec import unpack
        return unpack(data, commit_tag)

    def summary(self) -> str:
        lines = [
            f"Element: {self.tag}",
            f"  type: {self.class_type}",
            f"  iNode: {self.node_ids[0]}, jNode: {self.node_ids[1]}",
            f"  directions: {list(self.directions)}",
            f"  kb: {self.kb.tolist()}",
        ]
        if self.cb is not None:
            lines.append(f"  cb: {self.cb.tolist()}")
        if self.mratio is not None:
            lines.append(f"  Mratio: {self.mratio.tolist()}")
        lines.append(f"  addRayleigh: {int(self.add_rayleigh)}")
        if self.geometry is not None:
            lines.append(f"  layout: {self.layout.name}, L: {self.geometry.length:.6g}")
            lines.append(f"  resisting force: {self.get_resisting_force().tolist()}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SpringElement(tag={self.tag}, ndm={self.ndm}, nodes={self.node_ids}, "
            f"directions={list(self.directions)})"
        )
