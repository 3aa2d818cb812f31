import logging

from flask import Blueprint, jsonify, request

from app.auth import auth_required, current_identity
from app.errors import ValidationError
from app.services.catalog_service import CatalogService
from app.services.query_service import ProblemFilters, QueryService
from app.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

problems_bp = Blueprint('problems', __name__, url_prefix='/problems')


def _body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _user_id():
    return current_identity().user_id


@problems_bp.route('/add-problem', methods=['POST'])
@auth_required
def add_problem():
    """Resolve a problem into the shared catalog without tracking it."""
    data = _body()
    title_slug, platform = CatalogService.parse_reference(
        data.get('titleSlug') or data.get('title_slug') or data.get('url'),
        data.get('platform'),
    )
    problem = CatalogService.resolve_problem(title_slug, platform)
    return jsonify({
        'message': 'Problem fetched successfully',
        'problem': problem.to_dict(),
    })


@problems_bp.route('/user-problems', methods=['POST'])
@auth_required
def add_user_problem():
    data = _body()
    user_problem = TrackingService.add_user_problem(
        _user_id(),
        data.get('titleSlug') or data.get('title_slug') or data.get('url'),
        platform=data.get('platform'),
        status=data.get('status'),
        notes=data.get('notes'),
        date_solved=data.get('date_solved'),
    )
    return jsonify({
        'message': 'Problem added to tracking list successfully',
        'user_problem': user_problem.to_dict(include_content=True),
    }), 201


@problems_bp.route('/user-problems')
@auth_required
def list_user_problems():
    filters = ProblemFilters.from_args(request.args)
    result = QueryService.list_user_problems(
        _user_id(),
        filters,
        page=request.args.get('page'),
        limit=request.args.get('limit'),
    )
    return jsonify(result)


@problems_bp.route('/user-problems/<int:user_problem_id>')
@auth_required
def get_user_problem(user_problem_id):
    user_problem = TrackingService.get_user_problem(_user_id(), user_problem_id)
    return jsonify({'user_problem': user_problem.to_dict(include_content=True)})


@problems_bp.route('/user-problems/<int:user_problem_id>', methods=['PUT'])
@auth_required
def update_user_problem(user_problem_id):
    data = _body()
    changes = {
        key: data[key]
        for key in ('status', 'notes', 'problem_link', 'date_solved')
        if key in data
    }
    user_problem = TrackingService.update_user_problem(_user_id(), user_problem_id, changes)
    return jsonify({
        'message': 'User problem updated successfully',
        'user_problem': user_problem.to_dict(include_content=True),
    })


@problems_bp.route('/user-problems/<int:user_problem_id>', methods=['DELETE'])
@auth_required
def delete_user_problem(user_problem_id):
    TrackingService.delete_user_problem(_user_id(), user_problem_id)
    return jsonify({'message': 'User problem deleted successfully'})


@problems_bp.route('/user-problems/<int:user_problem_id>/revisions', methods=['POST'])
@auth_required
def add_revision(user_problem_id):
    user_problem = TrackingService.add_revision(
        _user_id(), user_problem_id, _body().get('revision_notes')
    )
    return jsonify({
        'message': 'Revision added successfully',
        'user_problem': user_problem.to_dict(include_content=True),
    })


@problems_bp.route(
    '/user-problems/<int:user_problem_id>/revisions/<int:revision_no>', methods=['PUT']
)
@auth_required
def update_revision(user_problem_id, revision_no):
    user_problem = TrackingService.update_revision(
        _user_id(), user_problem_id, revision_no, _body().get('revision_notes')
    )
    return jsonify({
        'message': 'Revision updated successfully',
        'user_problem': user_problem.to_dict(include_content=True),
    })


@problems_bp.route(
    '/user-problems/<int:user_problem_id>/revisions/<int:revision_no>', methods=['DELETE']
)
@auth_required
def delete_revision(user_problem_id, revision_no):
    user_problem = TrackingService.delete_revision(_user_id(), user_problem_id, revision_no)
    return jsonify({
        'message': 'Revision deleted successfully',
        'user_problem': user_problem.to_dict(include_content=True),
    })


@problems_bp.route('/stats')
@auth_required
def stats():
    return jsonify({'stats': QueryService.get_user_stats(_user_id())})
