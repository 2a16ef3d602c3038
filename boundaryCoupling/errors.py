# -- Boundary Model Exceptions -- #

'''
Exception hierarchy for the boundary particle model.

All package-specific exceptions inherit from BoundaryModelError so
callers can catch them generically. Degenerate boundary volumes are
not represented here: the volume estimator clamps them to zero.

Sean Bowman [02/05/2026]
'''


class BoundaryModelError(RuntimeError):
    '''Base exception for all boundary model errors.'''
    pass


class DuplicateFieldError(BoundaryModelError):
    '''
    A field with the same name is already registered.

    Raised when:
    - FieldRegistry.addField is called with an existing name
    '''
    pass


class FieldNotFoundError(BoundaryModelError, KeyError):
    '''
    No field with the requested name is registered.

    Raised when:
    - FieldRegistry.getField is called with an unknown name
    '''

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return RuntimeError.__str__(self)


class IndexOutOfRangeError(BoundaryModelError, IndexError):
    '''
    Particle index outside [0, N).

    Only raised when Python runs with assertions enabled; optimized
    runs (python -O) treat the range as a caller precondition.
    '''
    pass


class PersistenceFormatError(BoundaryModelError):
    '''
    Stored state does not match the receiving boundary model.

    Raised when:
    - The stored particle count differs from the model's count
    - The stored strong-coupling flag differs from the model's
    - The stream ends before all arrays were read
    '''
    pass


class ResortError(BoundaryModelError):
    '''
    A permutation cannot be applied to every per-particle array.

    Raised when:
    - A sort table is not a permutation of [0, N)
    - A registered extension array does not have N entries
    '''
    pass


class StrongCouplingDisabledError(BoundaryModelError):
    '''Strong-coupling field accessed on a model created without it.'''
    pass
