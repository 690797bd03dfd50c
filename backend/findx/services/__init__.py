"""
Service layer.

Every public coroutine takes the AsyncSession and the acting User explicitly
and performs one transaction. Failures are raised as findx.errors types.
"""
