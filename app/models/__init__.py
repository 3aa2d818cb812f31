from .user import User
from .problem import Problem
from .user_problem import UserProblem

__all__ = [
    'User',
    'Problem',
    'UserProblem',
]
