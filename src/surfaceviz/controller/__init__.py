"""
The CONTROLLER layer drives the model from UI events and timers.
"""
