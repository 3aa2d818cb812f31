from flask import Blueprint, jsonify, request

from app.auth import auth_required, current_identity
from app.errors import NotFound, ValidationError
from app.extensions import db
from app.models import User

user_bp = Blueprint('user', __name__, url_prefix='/user')

# Identity fields (google_id, email) come from Google and are not editable
_EDITABLE_FIELDS = ('name', 'profile_picture')


def _load_current_user():
    user = db.session.get(User, current_identity().user_id)
    if user is None:
        raise NotFound('User not found')
    return user


@user_bp.route('/profile')
@auth_required
def get_profile():
    return jsonify(_load_current_user().to_dict())


@user_bp.route('/profile', methods=['PUT'])
@auth_required
def update_profile():
    data = request.get_json(silent=True) or {}
    user = _load_current_user()

    unknown = sorted(set(data) - set(_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError('Unsupported profile fields', details={'fields': unknown})

    if 'name' in data:
        name = (data['name'] or '').strip() if isinstance(data['name'], str) else ''
        if not name:
            raise ValidationError('name must not be empty')
        user.name = name[:120]
    if 'profile_picture' in data:
        user.profile_picture = data['profile_picture'] or None

    db.session.commit()
    return jsonify(user.to_dict())
