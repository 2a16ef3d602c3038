# -- Strong Coupling Boundary State -- #

'''
Per-particle and per-body state for strong fluid-rigid coupling.

Only allocated when the implicit coupling solver is in use
(BoundaryConfig.strongCoupling). The boundary model resizes, resets,
resorts and persists these arrays together with its own.

References:
-----------
Gissler et al. (2019) -- Interlinked SPH pressure solvers for strong
    fluid-rigid coupling

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def resizeArray(array: np.ndarray, n: int) -> np.ndarray:
    '''New zero-filled array of length n holding the common prefix of array.'''
    resized = np.zeros((n,) + array.shape[1:], dtype=array.dtype)
    keep = min(n, array.shape[0])
    resized[:keep] = array[:keep]
    return resized


@dataclass
class StrongCouplingState:
    '''
    Strong-coupling fields of one boundary model.

    Parameters:
    -----------
    density : np.ndarray
        Boundary particle density, shape (N,)
    pressure : np.ndarray
        Boundary particle pressure, shape (N,)
    v_s : np.ndarray
        Predicted velocity, shape (N, 3)
    s : np.ndarray
        Source term of the boundary pressure solve, shape (N,)
    v_rr : np.ndarray
        Velocity response of the rigid body at each particle, shape (N, 3)
    minus_rho_div_v_rr : np.ndarray
        Right-hand side contribution -rho * div(v_rr), shape (N,)
    v_rr_body : np.ndarray
        Linear velocity response of the body, shape (3,)
    omega_rr_body : np.ndarray
        Angular velocity response of the body, shape (3,)
    '''

    density: np.ndarray
    pressure: np.ndarray
    v_s: np.ndarray
    s: np.ndarray
    v_rr: np.ndarray
    minus_rho_div_v_rr: np.ndarray
    v_rr_body: np.ndarray = field(default_factory=lambda: np.zeros(3))
    omega_rr_body: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Fixed order used for resizing, resorting and persistence
    perParticleFields = ('density', 'pressure', 'v_s', 's', 'v_rr', 'minus_rho_div_v_rr')

    @classmethod
    def allocate(cls, n: int) -> StrongCouplingState:
        '''Zero-initialized state for n particles.'''
        return cls(
            density=np.zeros(n),
            pressure=np.zeros(n),
            v_s=np.zeros((n, 3)),
            s=np.zeros(n),
            v_rr=np.zeros((n, 3)),
            minus_rho_div_v_rr=np.zeros(n),
        )

    def resize(self, n: int) -> None:
        for name in self.perParticleFields:
            setattr(self, name, resizeArray(getattr(self, name), n))

    def reset(self) -> None:
        '''Clear all per-step solver state.'''
        for name in self.perParticleFields:
            getattr(self, name).fill(0.0)
        self.v_rr_body.fill(0.0)
        self.omega_rr_body.fill(0.0)

    def arrays(self) -> list[np.ndarray]:
        return [getattr(self, name) for name in self.perParticleFields]
