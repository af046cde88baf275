"""py-stdio — how a program talks to the world.

Standard streams, command-line arguments, environment variables, and
configuration files, taught through small real programs, a shell, and
guided lessons.
"""
