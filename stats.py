import numpy as np
from typing import Dict, List, Sequence, Tuple, Union


def stats_block(vals: Sequence[float]) -> Dict[str, Union[float, List[float]]]:
    if len(vals) == 0:
        raise ValueError("vals is empty")

    arr = np.asarray(vals, dtype=float)

    return {
        "average": float(arr.mean()),
        "median": float(np.median(arr)),
        "min": float(arr.min()),
        "max": float(arr.max()),
        "quintiles": [float(q) for q in np.percentile(arr, [20, 40, 60, 80])],
    }


def link_degrees(adjacency: np.ndarray) -> Tuple[List[int], List[int]]:
    """(out_degrees, in_degrees) per page: row sums and column sums of the adjacency matrix."""
    adj = np.asarray(adjacency)
    return [int(v) for v in adj.sum(axis=1)], [int(v) for v in adj.sum(axis=0)]
