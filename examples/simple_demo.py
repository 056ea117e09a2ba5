#!/usr/bin/env python3
"""
Simple mathq Demo

A minimal walk-through of lazy matrix queries, typed arithmetic and the
text format.
"""

import sys
import os
import random
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mathq import Matrix, IntMatrix, ParseToString, configure_logging

configure_logging(level="INFO")

# A (2 * 3) matrix of strings
words = Matrix([
    ["12g", "36a", "54c"],
    ["98f", "32d", "75e"],
])
print(words, "\n")

# Queries are lazy; as_parallel() lets the remaining steps run in parallel when worth it
plan = words.as_parallel().transpose().map(lambda s: int(s[:-1]))
print(f"Plan built: {plan!r}\n")

# The plan has not run yet, so this edit shows up in the result
words[0, 0] = "21b"
numbers = plan.to_matrix(IntMatrix)
print(numbers, "\n")

# A (3 * 2) matrix of random numbers
noise = IntMatrix(shape=(3, 2)).set(lambda _i, _j: random.randint(10, 99)).to_matrix(IntMatrix)
print(noise, "\n")

# Concatenation: & puts matrices side by side, | stacks them
wide = numbers & noise
print(wide, "\n")

row = IntMatrix([88, 77, 66, 55])
print(wide | row, "\n")

# Arithmetic on typed matrices
m = IntMatrix([[1, 2], [3, 4]])
print(m + m, "\n")
print(m * m, "\n")

# Parsing and custom formatting
names = Matrix.from_string('[["sfe", "wrf"]\n ["rhj", "sgd"]\n ["dfg", "qac"]]')
zipped = numbers.zip(names).to_matrix()

rule = ParseToString().add(tuple, lambda pair: f"<{pair[0]}-{pair[1]}>")
print(zipped.to_string(rule))
