import numpy as np

from pypmsm.utils import *


@dataclass
class Controller(Base):
	"""FOC inverter limits and current control law.

	Strategies:
		'MTPA': pick the current angle that maximizes torque per amp
		'Id=0': keep all current on the q-axis
	"""
	strategies = ('MTPA', 'Id=0')

	phase_current_limit: float		# peak phase amps
	bus_voltage: float				# DC bus volts
	voltage_utilization: float = 1.0	# fraction of Vdc/sqrt(3) we may command; not clamped
	strategy: str = 'MTPA'
	field_weakening: bool = False

	def __post_init__(self):
		if self.strategy not in self.strategies:
			raise ValueError(f'strategy should be one of {self.strategies}, got {self.strategy!r}')

	@property
	def voltage_limit(self):
		"""Peak phase voltage available; the svpwm inscribed circle, derated by utilization"""
		return self.bus_voltage / np.sqrt(3) * self.voltage_utilization


def define_ideal_controller(strategy='MTPA', field_weakening=True):
	return Controller(
		phase_current_limit=10_000,
		bus_voltage=10_000,
		strategy=strategy,
		field_weakening=field_weakening,
	)
