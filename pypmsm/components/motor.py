import numpy as np

from pypmsm.utils import *


@dataclass
class Motor(Base):
	"""PMSM motor model, in terms of its steady state dq-frame parameters

	The dq frame is aligned with the rotor flux, and we use the amplitude invariant convention;
	a current vector of magnitude I at angle beta is Id = -I sin(beta), Iq = I cos(beta),
	so that positive beta means demagnetizing Id.

	Nothing here checks the parameters for physical consistency;
	that Ld equals Lq for a surface magnet motor, for instance, is up to the caller.
	"""
	types = ('IPMSM', 'SPMSM')

	R: float			# stator phase resistance, ohm
	Ld: float			# d-axis inductance, H
	Lq: float			# q-axis inductance, H
	psi_f: float		# permanent magnet flux linkage, Wb
	pole_pairs: int
	motor_type: str = 'IPMSM'	# informational only; does not enter the equations

	def __post_init__(self):
		if self.motor_type not in self.types:
			raise ValueError(f'motor_type should be one of {self.types}, got {self.motor_type!r}')

	@property
	def salience(self):
		"""Reluctance torque term; negative for interior magnet motors"""
		return self.Ld - self.Lq

	@property
	def characteristic_current(self):
		"""d-axis current that exactly cancels the magnet flux"""
		return np.divide(self.psi_f, self.Ld)

	def surface(self):
		"""Surface magnet equivalent of this motor, with Lq set to Ld"""
		return self.replace(Lq=self.Ld, motor_type='SPMSM')

	@staticmethod
	def currents(amps, beta):
		"""Map current magnitude and angle in radians to Id, Iq"""
		return -amps * np.sin(beta), amps * np.cos(beta)

	def torque(self, Id, Iq):
		"""Electromagnetic torque in Nm; magnet plus reluctance torque"""
		return 1.5 * self.pole_pairs * (self.psi_f * Iq + self.salience * Id * Iq)

	def voltage_dq(self, Id, Iq, omega):
		"""Steady state voltage vector required to hold a current state, at electrical omega in rad/s"""
		Vd = self.R * Id - omega * self.Lq * Iq
		Vq = self.R * Iq + omega * (self.Ld * Id + self.psi_f)
		return Vd, Vq

	def voltage(self, Id, Iq, omega):
		"""Magnitude of the dq voltage vector"""
		Vd, Vq = self.voltage_dq(Id, Iq, omega)
		return np.sqrt(Vd ** 2 + Vq ** 2)
