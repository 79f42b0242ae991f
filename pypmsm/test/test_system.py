import logging

import numpy as np
import pytest

from pypmsm.system import *
from pypmsm.library import default


def scenario(field_weakening, strategy='Id=0'):
	return default.system(field_weakening=field_weakening, strategy=strategy)


def test_scenario_a():
	"""Without field weakening, torque rolls off above base speed until the envelope collapses"""
	result = compute_curve(scenario(field_weakening=False))
	graphs = result.graphs()
	assert result.base_speed == 3400
	above = graphs['rpm'] >= result.base_speed
	assert np.all(np.diff(graphs['torque'][above]) <= 0)
	# ends early, once the back-EMF alone exceeds the voltage limit
	assert result.max_speed == 3850
	assert result.points[-1].torque < 0.01
	assert all(p.torque >= 0.01 for p in result.points[:-1] if p.rpm > 100)


def test_scenario_b():
	"""Field weakening leaves base speed alone, but extends the envelope"""
	a = compute_curve(scenario(field_weakening=False))
	b = compute_curve(scenario(field_weakening=True))
	assert b.base_speed == a.base_speed
	assert b.max_speed > a.max_speed
	assert b.max_speed < 5000
	assert b.max_speed <= estimate_max_speed(scenario(field_weakening=True))
	ta = {p.rpm: p.torque for p in a.points}
	tb = {p.rpm: p.torque for p in b.points}
	assert tb[3600] > ta[3600]
	# weakening shows as a large current angle before the collapse
	assert max(p.current_angle for p in b.points) > 45
	assert any(p.Id < 0 for p in b.points)


@pytest.mark.parametrize('strategy', ['MTPA', 'Id=0'])
@pytest.mark.parametrize('field_weakening', [False, True])
def test_properties(strategy, field_weakening):
	system = scenario(field_weakening, strategy)
	result = compute_curve(system)
	graphs = result.graphs()

	assert result.points[0].rpm == 0
	assert result.points[0].power == 0
	assert np.all(np.diff(graphs['rpm']) == Sweep().step_rpm(system.max_rpm))
	assert np.all(graphs['voltage_index'] >= 0)
	assert np.all(graphs['voltage_index'] <= 1)
	assert np.all(graphs['torque'] >= 0)
	assert np.all(graphs['power'] >= 0)
	assert result.max_power == graphs['power'].max()

	motor = system.motor
	base = result.points[0]
	assert result.max_torque == pytest.approx(
		1.5 * motor.pole_pairs * (motor.psi_f * base.Iq + motor.salience * base.Id * base.Iq))


def test_zero_d_below_base_speed():
	for fw in [False, True]:
		result = compute_curve(scenario(field_weakening=fw))
		assert all(p.Id == 0 for p in result.points if p.rpm <= result.base_speed)


def test_mtpa():
	result = compute_curve(scenario(field_weakening=True, strategy='MTPA'))
	assert result.mtpa_angle == pytest.approx(5.5)
	assert result.max_torque > compute_curve(scenario(field_weakening=True)).max_torque


def test_idempotent():
	system = scenario(field_weakening=True, strategy='MTPA')
	assert compute_curve(system) == compute_curve(system)


def test_low_ceiling():
	"""Never leaving the constant torque region, base speed stays 0 by convention"""
	result = compute_curve(default.system(max_rpm=100))
	assert result.base_speed == 0
	assert [p.rpm for p in result.points] == list(range(0, 101, 10))
	assert all(p.torque == result.max_torque for p in result.points)


def test_no_current():
	result = compute_curve(default.system(phase_current_limit=0))
	assert result.max_torque == 0
	assert result.max_power == 0
	assert result.max_speed == 150


def test_sweep_config():
	sweep = Sweep()
	assert sweep.step_rpm(5000) == 50
	assert sweep.step_rpm(500) == 10
	assert sweep.step_rpm(12345) == 124
	# without the cutoff, the sweep runs to its ceiling
	result = compute_curve(scenario(field_weakening=False), Sweep(cutoff_torque=0))
	assert result.max_speed == 5000
	assert result.points[-1].torque == 0
	assert result.final_voltage_index == 1


def test_estimate_no_field_weakening():
	system = scenario(field_weakening=False)
	rpm = estimate_max_speed(system)
	omega = system.controller.voltage_limit / system.motor.psi_f
	raw = omega * 60 / (2 * np.pi * system.motor.pole_pairs)
	assert 0 <= rpm - raw < 100
	assert rpm == 3900


def test_estimate_field_weakening():
	system = scenario(field_weakening=True)
	assert not system.speed_unbounded
	assert estimate_max_speed(system) == 4800


def test_estimate_unbounded():
	system = scenario(field_weakening=True)
	system = system.replace(phase_current_limit=system.motor.characteristic_current)
	assert system.speed_unbounded
	assert estimate_max_speed(system) == 20000
	assert estimate_max_speed(system.replace(phase_current_limit=100)) == 20000
	assert estimate_max_speed(system, Sweep(unbounded_rpm=50000)) == 50000


def test_estimate_flux_cancellation():
	"""Residual flux just short of zero is treated as unbounded too"""
	system = scenario(field_weakening=True)
	system = system.replace(phase_current_limit=system.motor.characteristic_current * (1 - 1e-9))
	assert not system.speed_unbounded
	assert estimate_max_speed(system) == 20000


def test_estimate_degenerate():
	with np.errstate(divide='ignore'):
		assert np.isinf(estimate_max_speed(default.system(pole_pairs=0)))


def test_auto_max_rpm():
	system = auto_max_rpm(scenario(field_weakening=False))
	assert system.max_rpm == 3900
	result = compute_curve(system)
	assert result.max_speed <= 3900


def test_logging(caplog):
	with caplog.at_level(logging.DEBUG, logger='pypmsm.system'):
		compute_curve(scenario(field_weakening=False))
	assert 'base speed 3400 rpm' in caplog.text
	assert 'swept' in caplog.text


def test_plot():
	import matplotlib
	matplotlib.use('Agg')
	import matplotlib.pyplot as plt
	fig, ax = system_plot(scenario(field_weakening=True), show=False)
	# torque and base speed marker
	assert len(ax.get_lines()) == 2
	plt.close(fig)
