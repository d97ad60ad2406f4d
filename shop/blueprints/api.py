"""JSON API for customers and their products."""
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request, Response

from shop.exceptions import ValidationError
from shop.models import PLACEHOLDER_IMAGE_URL
from shop.services import customer_service
from shop.services.storage_service import resolve_image_url

api_bp = Blueprint('api', __name__, url_prefix='/api')


def _repository():
    return current_app.extensions['customer_repository']


def _upload_image() -> str:
    """Upload request.files['image'] if present; placeholder otherwise."""
    return resolve_image_url(
        current_app.extensions.get('image_store'),
        request.files.get('image'),
        PLACEHOLDER_IMAGE_URL
    )


def _payload() -> Dict[str, Any]:
    """Body as a dict, accepting both JSON and form posts."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@api_bp.route('/customers', methods=['GET'])
def list_customers() -> Response:
    """List customers, newest first."""
    customers = customer_service.list_customers(_repository())
    return jsonify({
        'success': True,
        'customers': [c.to_dict() for c in customers]
    })


@api_bp.route('/customers/<int:customer_id>', methods=['GET'])
def get_customer(customer_id: int) -> Response:
    """Get a single customer."""
    customer = customer_service.get_customer(_repository(), customer_id)
    return jsonify({'success': True, 'customer': customer.to_dict()})


@api_bp.route('/customers', methods=['POST'])
def create_customer() -> Tuple[Response, int]:
    """Create a customer with its first product (multipart form)."""
    data = _payload()
    customer_name = str(data.get('customerName') or '').strip()
    product_name = str(data.get('productName') or '').strip()

    # Reject before touching the image store
    if not customer_name or not product_name:
        raise ValidationError('customerName and productName are required')

    customer = customer_service.create_customer(
        _repository(),
        customer_name,
        {
            'name': product_name,
            'price': data.get('price'),
            'status': data.get('status'),
            'image': _upload_image(),
        }
    )
    return jsonify({'success': True, 'customer': customer.to_dict()}), 201


@api_bp.route('/customers/<int:customer_id>/products', methods=['POST'])
def add_product(customer_id: int) -> Response:
    """Append a product to an existing customer (multipart form)."""
    data = _payload()
    product_name = str(data.get('productName') or '').strip()
    if not product_name:
        raise ValidationError('productName is required')

    customer = customer_service.add_product(
        _repository(),
        customer_id,
        product_name,
        price=data.get('price'),
        status=data.get('status'),
        image=_upload_image(),
    )
    return jsonify({'success': True, 'customer': customer.to_dict()})


@api_bp.route('/customers/<int:customer_id>/change-payment', methods=['POST'])
def change_payment(customer_id: int) -> Response:
    """Change the payment status of one product."""
    data = _payload()
    products = customer_service.update_product_status(
        _repository(),
        customer_id,
        data.get('productId'),
        data.get('newStatus'),
    )
    return jsonify({'success': True, 'products': products})


@api_bp.route('/customers/<int:customer_id>', methods=['DELETE'])
def delete_customer(customer_id: int) -> Response:
    """Delete a customer; unknown ids succeed silently."""
    customer_service.delete_customer(_repository(), customer_id)
    return jsonify({'success': True, 'message': 'Customer deleted'})
