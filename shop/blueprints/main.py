"""Main blueprint with health check endpoints."""
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """API entry point."""
    return jsonify({
        'success': True,
        'message': 'Shop ledger API running',
        'customers': '/api/customers',
        'health': '/health'
    })


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    session = current_app.extensions.get('db_session')
    if session is None:
        return jsonify({
            'status': 'healthy',
            'database': 'external',
            'message': 'No SQL session configured'
        }), 200

    try:
        row = session.execute(text("SELECT 1 as health_check")).fetchone()

        if row and row[0] == 1:
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Database connection successful'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 500

    except Exception as e:
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Failed to connect to database'
        }), 500
