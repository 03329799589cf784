"""
Mechanical availability package.

The calculator is a pure function of (fleet size, work orders, date, class, now);
everything that touches storage, files or the terminal lives outside it.
"""
