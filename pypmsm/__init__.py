"""PMSM torque-speed envelopes from dq-frame parameters and inverter limits"""
__version__ = '0.1.0'
