"""
API Routes
Provides JSON endpoints for telemetry, analyses, charts, feedback, presets and export.
"""

import logging

from flask import Blueprint, Response, jsonify, current_app, request
from flask_caching import Cache

from calculations import build_chart_projection
from calculations.constants import SUPPORTED_BANDS
from exceptions import AnalysisInProgressError, ExportError, OracleError, ValidationError

api_bp = Blueprint('api', __name__)
cache = Cache()
logger = logging.getLogger(__name__)


def _get_analyzer():
    return current_app.config.get('HF_ANALYZER')


def _unavailable():
    return jsonify({'error': 'Propagation service not available'}), 503


TYPE_NAMES = {str: 'a string', bool: 'a boolean'}


def _json_body(**fields):
    """Return the JSON object body, checking the JSON type of each named field."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    for field, kind in fields.items():
        value = data.get(field)
        if value is not None and not isinstance(value, kind):
            raise ValidationError(f"{field} must be {TYPE_NAMES[kind]}")
    return data


@api_bp.route('/conditions', methods=['GET'])
def get_conditions():
    """Get current solar and ionospheric conditions."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        return jsonify(analyzer.get_conditions())

    except Exception as e:
        logger.error(f"Error getting conditions: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/conditions/history', methods=['GET'])
def get_conditions_history():
    """Get stored authoritative telemetry and the last known good snapshots."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        snapshots = analyzer.snapshots
        last_solar = snapshots.get_last_solar()
        last_ionosphere = snapshots.get_last_ionosphere()
        return jsonify({
            'lastSolar': last_solar.model_dump(mode='json') if last_solar else None,
            'lastIonosphere': last_ionosphere.model_dump(mode='json') if last_ionosphere else None,
            'solarHistory': snapshots.get_solar_history(),
            'ionosphereHistory': snapshots.get_ionosphere_history(),
        })

    except Exception as e:
        logger.error(f"Error getting conditions history: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/refresh', methods=['POST'])
def refresh_conditions():
    """Manually refresh telemetry; dropped if a refresh is already running."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        refreshed = analyzer.refresh(source='manual')
        return jsonify({'refreshed': refreshed, 'conditions': analyzer.get_conditions()})

    except Exception as e:
        logger.error(f"Error refreshing conditions: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/auto-refresh', methods=['POST'])
def set_auto_refresh():
    """Enable or disable the periodic refresh."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        data = _json_body(enabled=bool)
        if data.get('enabled') is None:
            return jsonify({'error': 'enabled is required'}), 400

        return jsonify({'autoRefresh': analyzer.set_auto_refresh(data['enabled'])})

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error setting auto-refresh: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/band', methods=['POST'])
def select_band():
    """Select the band used for telemetry and analyses."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        data = _json_body(band=str)
        band = analyzer.select_band(data.get('band', ''))
        return jsonify({'band': band, 'supportedBands': list(SUPPORTED_BANDS)})

    except ValidationError as e:
        return jsonify({'error': str(e), 'supportedBands': list(SUPPORTED_BANDS)}), 400
    except Exception as e:
        logger.error(f"Error selecting band: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/historical', methods=['GET'])
def get_historical():
    """Get the 24 hour trend series."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        return jsonify([sample.model_dump(mode='json') for sample in analyzer.historical])

    except Exception as e:
        logger.error(f"Error getting historical data: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/analyze', methods=['POST'])
def analyze_path():
    """Run a propagation analysis between two locations."""
    analyzer = _get_analyzer()
    if not analyzer:
        return _unavailable()

    try:
        data = _json_body(fromLocation=str, toLocation=str, band=str)
        outcome = analyzer.analyze(
            data.get('fromLocation', ''),
            data.get('toLocation', ''),
            data.get('band') or None,
        )
        return jsonify({
            'id': outcome.record.id,
            'analysis': outcome.analysis.model_dump(mode='json'),
            'forecast': outcome.forecast.model_dump(mode='json') if outcome.forecast else None,
            'charts': analyzer.chart_data.model_dump(mode='json') if analyzer.chart_data else None,
        })

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except AnalysisInProgressError as e:
        return jsonify({'error': str(e)}), 409
    except OracleError as e:
        logger.error(f"Analysis failed: {e}")
        return jsonify({'error': 'Analysis failed. Please check your inputs and try again.'}), 502
    except Exception as e:
        logger.error(f"Error analyzing path: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/analysis', methods=['GET'])
def get_analysis():
    """Get the latest analysis, its forecast and charts, plus session state."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        record = analyzer.analysis_record
        return jsonify({
            'state': analyzer.get_state(),
            'analysis': record.model_dump(mode='json') if record else None,
            'forecast': analyzer.forecast.model_dump(mode='json') if analyzer.forecast else None,
            'charts': analyzer.chart_data.model_dump(mode='json') if analyzer.chart_data else None,
        })

    except Exception as e:
        logger.error(f"Error getting analysis: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/analysis/history', methods=['GET'])
def get_analysis_history():
    """Get stored analyses, newest first."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        history = analyzer.orchestrator.get_history()
        return jsonify([record.model_dump(mode='json') for record in reversed(history)])

    except Exception as e:
        logger.error(f"Error getting analysis history: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@cache.memoize(timeout=3600)
def _chart_projection(analysis_id: str, band: str):
    record = _get_analyzer().orchestrator.get_record(analysis_id)
    if record is None:
        return None
    return build_chart_projection(record.analysis, band).model_dump(mode='json')


@api_bp.route('/charts/<analysis_id>', methods=['GET'])
def get_charts(analysis_id):
    """Get chart projections for a stored analysis."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        band = request.args.get('band', analyzer.selected_band)
        charts = _chart_projection(analysis_id, band)
        if charts is None:
            return jsonify({'error': f'Analysis {analysis_id} not found'}), 404
        return jsonify(charts)

    except Exception as e:
        logger.error(f"Error getting charts: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/feedback', methods=['POST'])
def submit_feedback():
    """Record whether an analysis was correct."""
    analyzer = _get_analyzer()
    if not analyzer:
        return _unavailable()

    try:
        data = _json_body(isCorrect=bool, analysisId=str)
        if data.get('isCorrect') is None:
            return jsonify({'error': 'isCorrect is required'}), 400

        record = analyzer.record_feedback(data['isCorrect'], data.get('analysisId'))
        return jsonify(record.model_dump(mode='json')), 201

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error recording feedback: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/presets', methods=['GET'])
def list_presets():
    """Get saved path presets."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        return jsonify([preset.model_dump(mode='json') for preset in analyzer.presets])

    except Exception as e:
        logger.error(f"Error listing presets: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/presets', methods=['POST'])
def create_preset():
    """Save a path preset."""
    analyzer = _get_analyzer()
    if not analyzer:
        return _unavailable()

    try:
        data = _json_body(fromLocation=str, toLocation=str, band=str, name=str)
        preset = analyzer.save_preset(
            data.get('fromLocation'),
            data.get('toLocation'),
            data.get('band'),
            name=data.get('name'),
        )
        return jsonify(preset.model_dump(mode='json')), 201

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error saving preset: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/presets/<preset_id>/apply', methods=['POST'])
def apply_preset(preset_id):
    """Load a preset into the current session."""
    analyzer = _get_analyzer()
    if not analyzer:
        return _unavailable()

    try:
        preset = analyzer.apply_preset(preset_id)
        return jsonify({'preset': preset.model_dump(mode='json'), 'state': analyzer.get_state()})

    except ValidationError as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        logger.error(f"Error applying preset: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/presets/<preset_id>', methods=['DELETE'])
def delete_preset(preset_id):
    """Delete a saved preset."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        if not analyzer.delete_preset(preset_id):
            return jsonify({'error': f'Preset {preset_id} not found'}), 404
        return jsonify({'deleted': preset_id})

    except Exception as e:
        logger.error(f"Error deleting preset: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/notifications', methods=['GET'])
def get_notifications():
    """Get the current notification and recent history."""
    try:
        analyzer = _get_analyzer()
        if not analyzer:
            return _unavailable()

        return jsonify({
            'current': analyzer.notifications.current,
            'recent': analyzer.notifications.recent(),
        })

    except Exception as e:
        logger.error(f"Error getting notifications: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@api_bp.route('/export', methods=['GET'])
def export_data():
    """Download the session as a JSON document."""
    analyzer = _get_analyzer()
    if not analyzer:
        return _unavailable()

    try:
        filename, content = analyzer.export_data()
        return Response(
            content,
            mimetype='application/json',
            headers={'Content-Disposition': f'attachment; filename={filename}'}
        )

    except ExportError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error exporting data: {e}")
        return jsonify({'error': 'Internal server error'}), 500
