"""Uncertain spacecraft mass budget.

Component masses are uncertain. The margin against the launch limit shares
the same draws as the total, so the two stay consistent sample by sample.

Run with:
    corrsample sample examples/mass_budget.py --name margin -n 10
    corrsample sources examples/mass_budget.py --name margin
"""

import random

import corrsample as cs

LAUNCH_LIMIT_KG = 180.0

structure = cs.Uncertain.from_draw(lambda: random.gauss(80.0, 4.0))
battery = cs.Uncertain.from_draw(lambda: random.gauss(25.0, 1.5))
payload = cs.Uncertain.from_draw(lambda: random.uniform(40.0, 60.0))  # noqa: S311

total_mass = structure + battery + payload
margin = LAUNCH_LIMIT_KG - total_mass

# Negative margins are reported as zero
usable_margin = cs.Uncertain.conditional(margin > 0.0, margin, 0.0)
