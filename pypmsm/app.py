"""Build a dash app to interact with a System object"""

from pypmsm.utils import *
from pypmsm.system import *


import plotly.graph_objects as go
from plotly.subplots import make_subplots
from dash import html, dcc, Output, Input, State
from dash.exceptions import PreventUpdate
import dash
import dash_bootstrap_components as dbc


def system_from_inputs(
	motor_type, R_milliohm, psi_f, Ld, Lq, pole_pairs,
	strategy, field_weakening, bus_voltage, voltage_utilization, phase_current_limit,
	max_rpm,
):
	"""Build a System from form values; resistance is entered in mOhm"""
	return System(
		motor=Motor(
			R=R_milliohm / 1e3,
			Ld=Ld,
			Lq=Ld if motor_type == 'SPMSM' else Lq,
			psi_f=psi_f,
			pole_pairs=int(pole_pairs),
			motor_type=motor_type,
		),
		controller=Controller(
			phase_current_limit=phase_current_limit,
			bus_voltage=bus_voltage,
			voltage_utilization=voltage_utilization,
			strategy=strategy,
			field_weakening=bool(field_weakening),
		),
		max_rpm=max_rpm,
	)


def curve_figure(result: SimulationResult):
	"""plotly torque and power envelope, on twin y-axes"""
	graphs = result.graphs()
	fig = make_subplots(specs=[[{'secondary_y': True}]])
	fig.add_trace(
		go.Scatter(x=graphs['rpm'], y=graphs['torque'], name='Torque', mode='lines', line_color='#2563eb'),
		secondary_y=False,
	)
	fig.add_trace(
		go.Scatter(x=graphs['rpm'], y=graphs['power'], name='Power', mode='lines', line_color='#16a34a'),
		secondary_y=True,
	)
	if result.base_speed:
		fig.add_vline(x=result.base_speed, line_dash='dash', line_color='gray', annotation_text='Base speed')
	fig.update_xaxes(title_text='Speed (rpm)')
	fig.update_yaxes(title_text='Torque (Nm)', secondary_y=False)
	fig.update_yaxes(title_text='Power (kW)', secondary_y=True)
	fig.update_layout(margin=dict(b=10, t=10, l=10, r=10))
	return fig


def summary(result: SimulationResult):
	return '\n'.join([
		f'Max torque: {result.max_torque:.3f} Nm',
		f'Base speed: {result.base_speed} rpm',
		f'Peak power: {result.max_power:.3f} kW',
		f'MTPA angle (low speed): {result.mtpa_angle:.1f} deg',
		f'Max FW angle: {result.final_angle:.1f} deg',
		f'Voltage utilization: {result.final_voltage_index:.1%}',
	])


def system_dash(system: System, sweep: Sweep = Sweep()):
	"""dash plotly app

	Edit motor and inverter parameters, and view the resulting torque-speed envelope
	"""
	motor = system.motor
	controller = system.controller
	fw_options = ['Field weakening']

	def number(label, id, value, step):
		return [
			dbc.Label(label),
			dbc.Input(value=value, type='number', id=id, min=0, step=step),
		]

	motor_tab = dbc.Tab(label='Motor', children=[
		dbc.Label('Motor type'),
		dcc.Dropdown(list(Motor.types), motor.motor_type, id='motor-type', clearable=False),
		*number('Stator resistance (mOhm)', 'R-input', motor.R * 1e3, 0.1),
		*number('Flux linkage (Wb)', 'psi-input', motor.psi_f, 1e-5),
		*number('d-axis inductance (H)', 'Ld-input', motor.Ld, 1e-7),
		*number('q-axis inductance (H)', 'Lq-input', motor.Lq, 1e-7),
		*number('Pole pairs', 'pole-pairs-input', motor.pole_pairs, 1),
		html.Small('Inductances are in Henry. 1 mH = 0.001 H.'),
	])
	controller_tab = dbc.Tab(label='Controller', children=[
		dbc.Label('Control strategy'),
		dcc.Dropdown(list(Controller.strategies), controller.strategy, id='strategy', clearable=False),
		dcc.Checklist(
			options=fw_options,
			value=fw_options if controller.field_weakening else [],
			id='field-weakening'),
		*number('DC bus voltage (V)', 'bus-voltage-input', controller.bus_voltage, 0.1),
		*number('SVPWM utilization (ratio of Vdc/sqrt(3))', 'utilization-input', controller.voltage_utilization, 0.01),
		*number('Max current, peak (A)', 'current-input', controller.phase_current_limit, 1),
		*number('Max simulation speed (rpm)', 'max-rpm-input', system.max_rpm, 100),
		dbc.Button('Auto', id='auto-max-rpm', size='sm'),
	])

	app = dash.Dash(external_stylesheets=[dbc.themes.BOOTSTRAP])
	app.layout = html.Div([
		dbc.Container(
			dbc.Row([
				dbc.Col(
					dcc.Graph(
						id='graph-content',
						style={"width": "100%", "height": "90vh"},
						responsive=True,
					),
					width=8,
				),
				dbc.Col([
					dbc.Tabs([
						motor_tab,
						controller_tab,
					]),
					html.Div(id='summary', style={'whiteSpace': 'pre-wrap'}),
				], width=4),
			]),
			fluid=True,
		),
		dcc.Store(id='system'),
	])

	@app.callback(
		Output('Lq-input', 'value'),
		Input('motor-type', 'value'),
		State('Ld-input', 'value'),
		State('Lq-input', 'value'),
		prevent_initial_call=True,
	)
	def compute_handler_motor_type(motor_type, Ld, Lq):
		# surface magnet motors have no saliency
		return Ld if motor_type == 'SPMSM' else Lq

	@app.callback(
		Output('system', 'data'),

		Input('motor-type', 'value'),
		Input('R-input', 'value'),
		Input('psi-input', 'value'),
		Input('Ld-input', 'value'),
		Input('Lq-input', 'value'),
		Input('pole-pairs-input', 'value'),
		Input('strategy', 'value'),
		Input('field-weakening', 'value'),
		Input('bus-voltage-input', 'value'),
		Input('utilization-input', 'value'),
		Input('current-input', 'value'),
		Input('max-rpm-input', 'value'),
	)
	def compute_handler_system(*values):
		# half-typed number fields come through as None
		if any(v is None for v in values):
			raise PreventUpdate
		return pickle_encode(system_from_inputs(*values))

	@app.callback(
		Output('max-rpm-input', 'value'),
		Input('auto-max-rpm', 'n_clicks'),
		State('system', 'data'),
		prevent_initial_call=True,
	)
	def compute_handler_auto_max_rpm(n_clicks, system):
		return estimate_max_speed(pickle_decode(system), sweep)

	@app.callback(
		Output('graph-content', 'figure'),
		Output('summary', 'children'),
		Input('system', 'data'),
	)
	def update_graph(system):
		if system is None:
			raise PreventUpdate
		result = compute_curve(pickle_decode(system), sweep)
		return curve_figure(result), summary(result)

	return app


if __name__ == '__main__':
	from pypmsm.library import default
	system_dash(default.system()).run(debug=True)
