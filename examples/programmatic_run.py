"""
Example: running the service from Python instead of the CLI.

Loads the simulator config, overrides a few settings, and runs one
orchestrator with an explicit run id so log lines can be correlated.
"""

from carbon_intensity import Orchestrator, load_app_config
from carbon_intensity.core.logger import configure_root_logger

configure_root_logger("INFO")

config = load_app_config("config/simulator.yaml")

# =============================================================================
# Example 1: bounded timed run, printed to the console
# =============================================================================
stats = Orchestrator(config, run_id="demo-timed").run()
print(f"Timed run: published={stats.published}, failed={stats.failed}")


# =============================================================================
# Example 2: single sweep with a different zone list
# =============================================================================
one_shot = config.model_copy(
    update={
        "reader": "one-shot",
        "simulator": config.simulator.model_copy(update={"zones": ["NO", "PL"]}),
    }
)
stats = Orchestrator(one_shot, run_id="demo-one-shot").run()
print(f"One-shot run: published={stats.published}")
