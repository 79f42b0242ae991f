import logging

import numpy as np

from pypmsm.utils import *
from pypmsm.components.motor import Motor
from pypmsm.components.controller import Controller
from pypmsm.operating_point import base_operating_point, solve_operating_point


logger = logging.getLogger(__name__)


@dataclass
class System(Base):
	"""Motor-inverter system; the complete input of a simulation"""
	motor: Motor
	controller: Controller
	max_rpm: float = 5000	# ceiling of the speed sweep

	@property
	def speed_unbounded(self):
		"""Whether field weakening can null the magnet flux entirely, within the current limit"""
		return bool(
			self.controller.field_weakening and
			self.controller.phase_current_limit >= self.motor.characteristic_current
		)


@dataclass
class Sweep(Base):
	"""Resolution and heuristic thresholds of the speed sweep and max speed estimate"""
	min_step_rpm: int = 10
	n_steps: int = 100
	# stop once torque falls below cutoff_torque, above cutoff_rpm.
	# this is a plotting convenience, not physics
	cutoff_rpm: float = 100
	cutoff_torque: float = 0.01
	mtpa_step: float = 0.5			# degrees
	coarse_step: float = 5
	fine_step: float = 1
	fine_span: float = 4
	angle_iterations: int = 20
	current_iterations: int = 15
	# stand-in for an unbounded speed estimate
	unbounded_rpm: float = 20000
	flux_epsilon: float = 1e-9
	rpm_rounding: float = 100

	def step_rpm(self, max_rpm):
		return max(self.min_step_rpm, int(np.ceil(max_rpm / self.n_steps)))


@dataclass
class SimulationPoint(Base):
	rpm: int
	torque: float			# Nm, clamped to >= 0
	power: float			# mechanical kW, clamped to >= 0
	voltage_index: float	# fraction of the voltage limit in use, clamped to <= 1
	current_angle: float	# degrees
	Id: float
	Iq: float


@dataclass
class SimulationResult(Base):
	"""Torque-speed envelope, ordered by ascending rpm, plus summary statistics"""
	points: Tuple[SimulationPoint, ...]
	max_torque: float	# torque of the constant torque region
	base_speed: int		# last speed at which the constant torque point is voltage feasible; 0 if never left
	max_power: float

	@property
	def mtpa_angle(self):
		"""Current angle at standstill, in degrees"""
		return self.points[0].current_angle
	@property
	def final_angle(self):
		"""Current angle at the last point, in degrees"""
		return self.points[-1].current_angle
	@property
	def final_voltage_index(self):
		return self.points[-1].voltage_index
	@property
	def max_speed(self):
		"""Last swept rpm"""
		return self.points[-1].rpm

	def graphs(self):
		"""Points as a dict of arrays, keyed by field name"""
		names = [f.name for f in dataclasses.fields(SimulationPoint)]
		return {n: np.array([getattr(p, n) for p in self.points]) for n in names}


def compute_curve(system: System, sweep: Sweep = Sweep()) -> SimulationResult:
	"""Sweep speed from standstill to system.max_rpm, solving the operating point at each step

	Each step is solved independently from the same base point;
	the sweep ends early once the torque envelope has collapsed.
	"""
	motor = system.motor
	controller = system.controller
	v_lim = controller.voltage_limit
	step = sweep.step_rpm(system.max_rpm)

	base, max_torque = base_operating_point(motor, controller, step=sweep.mtpa_step)

	points = []
	max_power = 0.0
	base_speed = None
	for rpm in range(0, int(np.floor(system.max_rpm)) + 1, step):
		omega_axle_rad = rpm_to_radians(rpm)
		omega_elec_rad = omega_axle_rad * motor.pole_pairs

		point = solve_operating_point(
			motor, controller, omega_elec_rad, base,
			angle_iterations=sweep.angle_iterations,
			current_iterations=sweep.current_iterations,
			coarse_step=sweep.coarse_step,
			fine_step=sweep.fine_step,
			fine_span=sweep.fine_span,
		)
		if point.region == 2 and base_speed is None:
			base_speed = max(0, rpm - step)
			logger.debug("voltage limit reached at %d rpm, base speed %d rpm", rpm, base_speed)

		em_torque = motor.torque(point.Id, point.Iq)
		mechanical_power = em_torque * omega_axle_rad / 1000
		torque = max(0.0, float(em_torque))
		power = max(0.0, float(mechanical_power))
		max_power = max(max_power, power)

		points.append(SimulationPoint(
			rpm=rpm,
			torque=torque,
			power=power,
			voltage_index=float(np.minimum(1, point.voltage / v_lim)),
			current_angle=float(np.rad2deg(point.beta)),
			Id=float(point.Id),
			Iq=float(point.Iq),
		))

		if rpm > sweep.cutoff_rpm and torque < sweep.cutoff_torque:
			logger.debug("torque collapsed to %g Nm at %d rpm; ending sweep", torque, rpm)
			break

	result = SimulationResult(
		points=tuple(points),
		max_torque=float(max_torque),
		base_speed=base_speed or 0,
		max_power=max_power,
	)
	logger.info(
		"swept %d points to %d rpm: max torque %.4g Nm, base speed %d rpm, max power %.4g kW",
		len(points), points[-1].rpm if points else 0, result.max_torque, result.base_speed, result.max_power)
	return result


def estimate_max_speed(system: System, sweep: Sweep = Sweep()) -> float:
	"""Closed form estimate of the attainable speed in rpm, rounded up

	Neglects resistive drop. Without field weakening this is the no-load speed;
	with field weakening, the speed at which the residual flux at full negative Id meets the voltage limit.
	If the residual flux can be nulled, speed is unbounded in theory,
	and we return sweep.unbounded_rpm as a practical sweep ceiling instead.
	"""
	motor = system.motor
	controller = system.controller
	if controller.field_weakening:
		if system.speed_unbounded:
			return float(sweep.unbounded_rpm)
		flux = np.abs(motor.psi_f - motor.Ld * controller.phase_current_limit)
		if flux < sweep.flux_epsilon:
			return float(sweep.unbounded_rpm)
	else:
		flux = np.float64(motor.psi_f)
	omega_elec_rad = controller.voltage_limit / flux
	rpm = radians_to_rpm(omega_elec_rad) / np.float64(motor.pole_pairs)
	return float(np.ceil(rpm / sweep.rpm_rounding) * sweep.rpm_rounding)


def auto_max_rpm(system: System, sweep: Sweep = Sweep()) -> System:
	"""Set the sweep ceiling to the estimated max speed"""
	return system.replace(max_rpm=estimate_max_speed(system, sweep))


def system_plot(system: System, sweep: Sweep = Sweep(), result=None, show=True):
	"""mpl plot of the torque and power envelope"""
	import matplotlib.pyplot as plt

	if result is None:
		result = compute_curve(system, sweep)
	graphs = result.graphs()

	fig, ax = plt.subplots(1, 1)
	ax.plot(graphs['rpm'], graphs['torque'], c='tab:blue', label='Torque')
	ax.set_xlabel('rpm')
	ax.set_ylabel('Nm')
	pax = ax.twinx()
	pax.plot(graphs['rpm'], graphs['power'], c='tab:green', label='Power')
	pax.set_ylabel('kW')
	if result.base_speed:
		ax.axvline(result.base_speed, c='gray', linestyle='--', label='Base speed')

	ax.legend(handles=list(ax.get_lines()) + list(pax.get_lines()), loc='upper right')
	strategy = system.controller.strategy
	fw = ', field weakening' if system.controller.field_weakening else ''
	ax.set_title(f'{system.motor.motor_type} {strategy}{fw}')

	if show:
		plt.show()
	return fig, ax
