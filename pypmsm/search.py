"""Fixed-cost search primitives

Every search here evaluates a fixed number of points,
so the cost of a sweep is bounded regardless of the motor parameters
"""
import numpy as np


def bisect(feasible, low, high, iterations, seek='min'):
	"""Bisect the bracket [low, high] over a monotone feasibility predicate

	Parameters
	----------
	feasible: callable mapping a float to a bool
	low, high: bracket
	iterations: number of midpoints to evaluate; the bracket ends themselves are never evaluated
	seek: 'min' to find the smallest feasible value, with feasibility towards `high`,
		'max' to find the largest feasible value, with feasibility towards `low`

	Returns
	-------
	The last feasible midpoint, or None if none of the midpoints was feasible
	"""
	if seek not in ('min', 'max'):
		raise ValueError(f"seek should be 'min' or 'max', got {seek!r}")
	found = None
	for _ in range(iterations):
		mid = (low + high) / 2
		if feasible(mid):
			found = mid
			if seek == 'min':
				high = mid
			else:
				low = mid
		elif seek == 'min':
			low = mid
		else:
			high = mid
	return found


def grid(start, stop, step):
	"""inclusive grid from start to stop"""
	n = int(np.floor((stop - start) / step + 1e-9)) + 1
	return start + step * np.arange(n)


def scan_max(f, start, stop, step):
	"""Maximize vectorized f over an inclusive grid; the first maximum wins"""
	x = grid(start, stop, step)
	y = f(x)
	i = np.argmax(y)
	return x[i], y[i]


def refine_max(f, start, stop, coarse, fine, span):
	"""Two-pass maximization of vectorized f

	A coarse grid scan over [start, stop], followed by a fine scan over +-span around the coarse optimum.
	The fine pass is not clipped to [start, stop],
	and only replaces the coarse optimum if it is strictly better
	"""
	x, y = scan_max(f, start, stop, coarse)
	xf, yf = scan_max(f, x - span, x + span, fine)
	if yf > y:
		return xf, yf
	return x, y
