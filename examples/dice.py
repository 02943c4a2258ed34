"""Two dice and their total.

Run with:
    corrsample sample examples/dice.py --name total -n 20
"""

import random

import corrsample as cs

die_a = cs.Uncertain.from_draw(lambda: random.randint(1, 6))  # noqa: S311
die_b = cs.Uncertain.from_draw(lambda: random.randint(1, 6))  # noqa: S311

total = die_a + die_b

# Always zero: both references see the same roll
difference_with_itself = die_a - die_a

# Bonus roll on doubles
doubles = (die_a - die_b).map(lambda d: d == 0)
score = cs.Uncertain.conditional(doubles, total * 2, total)
