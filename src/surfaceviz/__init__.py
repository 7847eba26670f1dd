"""
Animated 3D plots of bivariate functions and point clouds.
"""
