from typing import List, Dict, Tuple
import dataclasses
import numpy as np

dataclass = dataclasses.dataclass(frozen=True)


def rpm_to_radians(rpm):
	return rpm / 60 * (2*np.pi)
def radians_to_rpm(radians):
	return radians / (2*np.pi) * 60


def all_paths(obj):
	"""find all attributes in the object hierarchy that we could call 'replace' on"""
	if isinstance(obj, Base):
		for f in dataclasses.fields(obj):
			yield f.name
			for p in all_paths(getattr(obj, f.name)):
				yield f.name + '.' + p


def expand_paths(k, obj):
	"""given an object and key/path with . and wildcards,
	yield the full path if is present on the object hierarchy
	"""
	for p in all_paths(obj):
		if p == k or p.endswith('.' + k.lstrip('.')):
			yield p


@dataclass
class Base:
	"""Base class for immutable data class hierarchy,
	that allows for replacing nested attributes"""

	def replace(obj, /, **kwargs):
		"""
		Like dataclasses.replace but can replace an arbitrarily nested attributes
		double underscores __ denote a path separator; a leading __ or a bare name
		is a wildcard pattern, which will be replaced everywhere it matches in the object hierarchy
		"""
		for kk, v in kwargs.items():
			kk = kk.replace("__", ".")
			paths = list(expand_paths(kk, obj))
			if not paths:
				raise AttributeError(f'{type(obj).__name__} has no attribute matching {kk!r}')
			for k in paths:
				obj = obj.replace_inner(k, v)
		return obj

	def replace_inner(obj, path, value):
		"""Replace a single . separated attribute path"""
		head, _, tail = path.partition('.')
		if tail:
			value = getattr(obj, head).replace_inner(tail, value)
		return dataclasses.replace(obj, **{head: value})


import pickle
import codecs

def pickle_decode(obj):
	return pickle.loads(codecs.decode(obj.encode(), "base64"))
def pickle_encode(obj):
	return codecs.encode(pickle.dumps(obj), "base64").decode()
