import dash

from pypmsm.app import *
from pypmsm.library import default


def test_system_from_inputs():
	system = system_from_inputs('SPMSM', 59.5, 1.59e-3, 23.5e-6, 35e-6, 15, 'Id=0', ['Field weakening'], 18.5, 0.9, 13, 5000)
	assert system.motor.R == 59.5e-3
	# surface magnet motors are forced to Lq = Ld
	assert system.motor.Lq == system.motor.Ld
	assert system.controller.field_weakening
	assert not system_from_inputs('IPMSM', 59.5, 1.59e-3, 23.5e-6, 35e-6, 15, 'MTPA', [], 18.5, 0.9, 13, 5000).controller.field_weakening


def test_curve_figure():
	result = compute_curve(default.system(strategy='Id=0'))
	fig = curve_figure(result)
	assert [t.name for t in fig.data] == ['Torque', 'Power']
	assert 'Base speed: 3400 rpm' in summary(result)


def test_system_dash():
	app = system_dash(default.system())
	assert isinstance(app, dash.Dash)
	assert app.layout is not None
