"""Service modules"""
from .simulator import Simulator, StepResult, build_oracle, load_scenario

__all__ = ["Simulator", "StepResult", "build_oracle", "load_scenario"]
