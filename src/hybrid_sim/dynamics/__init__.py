"""Per-system dynamics modules (pendulum, drone) and shared helpers.

Each system module follows the same layout: STATE_NAMES, ACTUATOR_NAMES,
HORIZON, a Params dataclass, f(state, params, t), observe(state) and a
make_body(...) factory. Modules are resolved by name with
hybrid_sim.utils.import_system.
"""
