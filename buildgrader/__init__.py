"""
Build Grader: Automated Compile-Execute-Compare Homework Grading

Compiles every submitted source file, runs the resulting program against
the problem's input/expected-output catalog under a wall-clock limit and
scores the normalized results.
"""

__version__ = "0.1.0"
