"""
Core lowering pass (flow graph -> rule chain) and dependency resolution
"""
