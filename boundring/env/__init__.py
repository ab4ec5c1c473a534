from .env import Env as Env, HashAlgorithm as HashAlgorithm
from .load_env import load_env as load_env
