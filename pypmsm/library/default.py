from pypmsm.system import *


def ipmsm():
	"""Small 30 pole interior magnet motor, as used in robot joints"""
	return Motor(
		R=59.5e-3,
		Ld=23.5e-6,
		Lq=35e-6,
		psi_f=1.59e-3,
		pole_pairs=15,
		motor_type='IPMSM',
	)


def spmsm():
	"""Surface magnet variant of the above, at the mean of its inductances"""
	return ipmsm().replace(Ld=29.25e-6).surface()


def controller(strategy='MTPA', field_weakening=False):
	"""Low voltage svpwm drive"""
	return Controller(
		phase_current_limit=13,
		bus_voltage=18.5,
		voltage_utilization=0.9,
		strategy=strategy,
		field_weakening=field_weakening,
	)


def system(**kwargs):
	"""Default system; kwargs are passed on to System.replace"""
	system = System(
		motor=ipmsm(),
		controller=controller(),
		max_rpm=5000,
	)
	return system.replace(**kwargs)
