"""
Dense matrix type for the vertical-speed Kalman filter.

The estimator only works with 3×3 and 3×1 matrices. Inversion is plain
Gauss-Jordan elimination and the determinant is a recursive cofactor
expansion. Storage is a read-only float64 ``np.ndarray``, so a ``Matrix``
may be shared between filter instances.

Conventions:
    - Vectors are column matrices (n × 1).
    - Every operation returns a new ``Matrix``; operands are never mutated.
    - Shape mismatches raise ``ValueError`` (programming error).
    - Inverting a singular matrix raises ``SingularMatrixError``.
"""

from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from flightcore.errors import SingularMatrixError

ArrayLike = Union[Sequence[Sequence[float]], np.ndarray]

# Pivots smaller than this are treated as zero during elimination
PIVOT_TOLERANCE = 1e-12


class Matrix:
    """
    Immutable dense matrix with fixed dimensions.

    Example:
        >>> F = Matrix([[1.0, 1.0, 0.5], [0.0, 1.0, 1.0], [0.0, 0.0, 1.0]])
        >>> x = Matrix.vector([100.0, 0.5, 0.0])
        >>> (F @ x)[0, 0]
        100.5
    """

    __slots__ = ("_data",)

    def __init__(self, values: ArrayLike):
        data = np.array(values, dtype=float)
        if data.ndim != 2:
            raise ValueError(f"Matrix values must be 2D, got shape {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Matrix dimensions must be positive, got {data.shape}")
        data.setflags(write=False)
        self._data = data

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_grid(cls, values: Iterable[float], rows: int, columns: int) -> "Matrix":
        """Build a matrix from a flat row-major sequence."""
        flat = np.array(list(values), dtype=float)
        if flat.size != rows * columns:
            raise ValueError(
                f"Grid of {flat.size} values cannot fill a {rows}x{columns} matrix"
            )
        return cls(flat.reshape(rows, columns))

    @classmethod
    def vector(cls, values: Iterable[float]) -> "Matrix":
        """Build a column vector."""
        flat = np.array(list(values), dtype=float)
        return cls(flat.reshape(-1, 1))

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        return cls(np.eye(size))

    @classmethod
    def zeros(cls, rows: int, columns: int = 1) -> "Matrix":
        return cls(np.zeros((rows, columns)))

    @classmethod
    def diagonal(cls, values: Iterable[float]) -> "Matrix":
        return cls(np.diag(np.array(list(values), dtype=float)))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def is_square(self) -> bool:
        return self.rows == self.columns

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the underlying data."""
        return self._data.copy()

    def __getitem__(self, index: Tuple[int, int]) -> float:
        row, column = index
        return float(self._data[row, column])

    def __repr__(self) -> str:
        return f"Matrix({self._data.tolist()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash((self.shape, self._data.tobytes()))

    def allclose(self, other: "Matrix", atol: float = 1e-9) -> bool:
        """Elementwise comparison within an absolute tolerance."""
        return self.shape == other.shape and bool(
            np.allclose(self._data, other._data, rtol=0.0, atol=atol)
        )

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _check_same_shape(self, other: "Matrix", op: str) -> None:
        if self.shape != other.shape:
            raise ValueError(
                f"Cannot {op} matrices of shape {self.shape} and {other.shape}"
            )

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "add")
        return Matrix(self._data + other._data)

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "subtract")
        return Matrix(self._data - other._data)

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.columns != other.rows:
            raise ValueError(
                f"Inner dimensions do not match: {self.shape} @ {other.shape}"
            )
        result = np.zeros((self.rows, other.columns))
        for i in range(self.rows):
            for j in range(other.columns):
                result[i, j] = float(np.dot(self._data[i, :], other._data[:, j]))
        return Matrix(result)

    def __mul__(self, scalar: float) -> "Matrix":
        if isinstance(scalar, Matrix):
            raise TypeError("Use '@' for matrix products")
        return Matrix(self._data * float(scalar))

    __rmul__ = __mul__

    def __neg__(self) -> "Matrix":
        return Matrix(-self._data)

    def transpose(self) -> "Matrix":
        return Matrix(self._data.T)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def unit_complement(self) -> "Matrix":
        """Return I − self (square matrices only)."""
        if not self.is_square:
            raise ValueError(f"Unit complement requires a square matrix, got {self.shape}")
        return Matrix(np.eye(self.rows) - self._data)

    def inverse(self) -> "Matrix":
        """
        Invert a square matrix with Gauss-Jordan elimination.

        Partial pivoting picks the largest remaining pivot in each column.

        Raises:
            ValueError: If the matrix is not square.
            SingularMatrixError: If a pivot vanishes (matrix is singular).
        """
        if not self.is_square:
            raise ValueError(f"Only square matrices can be inverted, got {self.shape}")

        n = self.rows
        augmented = np.hstack([self._data.copy(), np.eye(n)])

        for col in range(n):
            pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
            pivot = augmented[pivot_row, col]
            if abs(pivot) < PIVOT_TOLERANCE:
                raise SingularMatrixError(
                    f"Matrix is singular (pivot {pivot:.3e} in column {col})"
                )
            if pivot_row != col:
                augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

            augmented[col] = augmented[col] / augmented[col, col]
            for row in range(n):
                if row != col:
                    augmented[row] = augmented[row] - augmented[row, col] * augmented[col]

        return Matrix(augmented[:, n:])

    def determinant(self) -> float:
        """Cofactor expansion along the first row."""
        if not self.is_square:
            raise ValueError(f"Determinant requires a square matrix, got {self.shape}")
        return _cofactor_determinant(self._data)


def _cofactor_determinant(data: np.ndarray) -> float:
    n = data.shape[0]
    if n == 1:
        return float(data[0, 0])
    if n == 2:
        return float(data[0, 0] * data[1, 1] - data[0, 1] * data[1, 0])

    total = 0.0
    for j in range(n):
        if data[0, j] == 0.0:
            continue
        minor = np.delete(np.delete(data, 0, axis=0), j, axis=1)
        sign = 1.0 if j % 2 == 0 else -1.0
        total += sign * float(data[0, j]) * _cofactor_determinant(minor)
    return total
