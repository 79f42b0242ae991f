"""Steady state operating point of a current limited, voltage limited PMSM drive

Below base speed, the drive holds the full-current operating point chosen by its control law.
Once that point demands more voltage than the inverter can supply,
the drive either rotates the current vector towards negative Id (field weakening),
or, without field weakening, lets the current magnitude roll off under the rising back-EMF.

References
----------
https://nl.mathworks.com/help/mcb/gs/pmsm-constraint-curves-and-their-application.html
"""
import numpy as np

from pypmsm.utils import *
from pypmsm.search import bisect, scan_max, refine_max


@dataclass
class OperatingPoint(Base):
	"""dq current state, and the voltage magnitude it requires at the speed it was solved for"""
	Id: float
	Iq: float
	beta: float			# current angle in radians
	voltage: float
	region: int = 1		# 1: constant torque, 2: voltage limited

	def at_speed(self, motor, omega):
		"""The same current state, with the voltage required at electrical omega"""
		return self.replace(voltage=motor.voltage(self.Id, self.Iq, omega))


def angle_torque(motor, amps):
	"""Torque as a vectorized function of current angle in degrees, at fixed current magnitude"""
	return lambda degrees: motor.torque(*motor.currents(amps, np.deg2rad(degrees)))


def base_operating_point(motor, controller, step=0.5):
	"""Full current operating point of the constant torque region

	This does not depend on speed; voltage is that at standstill

	Returns
	-------
	OperatingPoint, torque
	"""
	amps = controller.phase_current_limit
	beta = 0.0
	if controller.strategy == 'MTPA':
		degrees, torque = scan_max(angle_torque(motor, amps), 0, 90, step)
		# only move away from Id=0 for an actual torque gain
		if torque > 0:
			beta = float(np.deg2rad(degrees))
	Id, Iq = motor.currents(amps, beta)
	point = OperatingPoint(Id=Id, Iq=Iq, beta=beta, voltage=motor.voltage(Id, Iq, 0))
	return point, motor.torque(Id, Iq)


def field_weakening_point(motor, controller, omega, beta_start, iterations=20):
	"""Find the smallest current angle at full current that satisfies the voltage limit

	The smallest angle is the least demagnetizing one, and hence the one with most torque.
	If no angle up to 90 degrees satisfies the limit, torque collapses to zero;
	the returned point then has zero current, and the voltage is the bare back-EMF.
	"""
	amps = controller.phase_current_limit
	v_lim = controller.voltage_limit
	feasible = lambda beta: motor.voltage(*motor.currents(amps, beta), omega) <= v_lim
	beta = bisect(feasible, beta_start, np.pi / 2, iterations, seek='min')
	if beta is None:
		return OperatingPoint(Id=0.0, Iq=0.0, beta=beta_start, voltage=motor.voltage(0.0, 0.0, omega), region=2)
	Id, Iq = motor.currents(amps, beta)
	return OperatingPoint(Id=Id, Iq=Iq, beta=beta, voltage=motor.voltage(Id, Iq, omega), region=2)


def voltage_limited_point(motor, controller, omega, iterations=15, coarse_step=5, fine_step=1, fine_span=4):
	"""Find the largest current magnitude satisfying the voltage limit, at the control law angle

	Under MTPA, the optimal angle depends on the current magnitude,
	so it is searched anew for every trial magnitude, with a cheap coarse and fine scan.
	"""
	v_lim = controller.voltage_limit

	def point(amps):
		beta = 0.0
		if controller.strategy == 'MTPA':
			degrees, _ = refine_max(angle_torque(motor, amps), 0, 90, coarse_step, fine_step, fine_span)
			beta = float(np.deg2rad(degrees))
		Id, Iq = motor.currents(amps, beta)
		return OperatingPoint(Id=Id, Iq=Iq, beta=beta, voltage=motor.voltage(Id, Iq, omega), region=2)

	amps = bisect(lambda a: point(a).voltage <= v_lim, 0, controller.phase_current_limit, iterations, seek='max')
	if amps is None:
		return OperatingPoint(Id=0.0, Iq=0.0, beta=0.0, voltage=motor.voltage(0.0, 0.0, omega), region=2)
	return point(amps)


def solve_operating_point(
	motor, controller, omega, base,
	angle_iterations=20,
	current_iterations=15,
	coarse_step=5,
	fine_step=1,
	fine_span=4,
):
	"""Operating point at electrical omega in rad/s, given the base operating point

	Returns the base point if it is voltage feasible at this speed,
	else the voltage limited point of the active control strategy
	"""
	point = base.at_speed(motor, omega)
	if point.voltage <= controller.voltage_limit:
		return point
	if controller.field_weakening:
		return field_weakening_point(motor, controller, omega, base.beta, iterations=angle_iterations)
	return voltage_limited_point(
		motor, controller, omega,
		iterations=current_iterations,
		coarse_step=coarse_step,
		fine_step=fine_step,
		fine_span=fine_span,
	)
