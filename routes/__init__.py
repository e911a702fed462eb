from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')
storage_bp = Blueprint('storage', __name__, url_prefix='/storage')

from . import auth, storage
