from flask import Blueprint, jsonify, request

from bingo.schemas import HistoryQuerySchema, UserQuerySchema, WalletRequestSchema
from bingo.services.bingo import get_engine
from bingo.services.wallet import DEPOSIT, PAYMENT_METHODS, WITHDRAWAL


wallet = Blueprint('wallet', __name__)

_request_schema = WalletRequestSchema()
_history_schema = HistoryQuerySchema()
_user_schema = UserQuerySchema()


@wallet.route('/deposit', methods=['POST'])
def deposit():
    data = _request_schema.load(request.get_json(silent=True) or {})
    result = get_engine().wallet.deposit(data['userId'], data['amount'])
    return jsonify(result)


@wallet.route('/withdraw', methods=['POST'])
def withdraw():
    data = _request_schema.load(request.get_json(silent=True) or {})
    result = get_engine().wallet.withdraw(data['userId'], data['amount'])
    return jsonify(result)


@wallet.route('/deposit/history', methods=['GET'])
def deposit_history():
    args = _history_schema.load(request.args)
    return jsonify(get_engine().wallet.history(args['userId'], DEPOSIT, args['limit'], args['offset']))


@wallet.route('/withdraw/history', methods=['GET'])
def withdraw_history():
    args = _history_schema.load(request.args)
    return jsonify(get_engine().wallet.history(args['userId'], WITHDRAWAL, args['limit'], args['offset']))


@wallet.route('/balance', methods=['GET'])
def balance():
    args = _user_schema.load(request.args)
    engine = get_engine()
    return jsonify({
        'userId': args['userId'],
        'balance': float(engine.wallet.get_balance(args['userId'])),
        'currency': engine.wallet.currency,
    })


@wallet.route('/payment-methods', methods=['GET'])
def payment_methods():
    return jsonify({'paymentMethods': PAYMENT_METHODS})


@wallet.route('/withdrawal-info', methods=['GET'])
def withdrawal_info():
    return jsonify({'withdrawalInfo': get_engine().wallet.withdrawal_info()})
