"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for committee operations.
-------------------------------------------------------------------------
"""
import logging

logger = logging.getLogger('committees')


class CommitteeLogger:
    """Centralized logging for committee operations"""

    @staticmethod
    def log_decision(decision, user):
        """Log a committee decision with full context"""
        logger.info(
            f"Decision recorded: {decision.title} | "
            f"Committee: {decision.committee.code} | "
            f"Submission: {decision.submission_id} | "
            f"Decision: {decision.decision} | "
            f"Votes: {decision.votes_for}/{decision.votes_against}/{decision.votes_abstain} | "
            f"Decided by: {user.emirates_id}",
            extra={
                'decision_id': decision.pk,
                'committee_id': decision.committee_id,
                'submission_id': decision.submission_id,
                'decision': decision.decision,
                'user_id': user.id,
            }
        )

    @staticmethod
    def log_workflow_step(submission, workflow_type: str, step: str):
        """Log a workflow follow-up triggered by a decision"""
        logger.info(
            f"Workflow step: {workflow_type}.{step} | "
            f"Submission: {submission.pk} | "
            f"Entity: {submission.workflow_entity_id}",
            extra={
                'submission_id': submission.pk,
                'workflow_type': workflow_type,
                'step': step,
                'entity_id': submission.workflow_entity_id,
            }
        )

    @staticmethod
    def log_vote(vote, user):
        """Log a vote cast on a submission"""
        logger.info(
            f"Vote cast: {vote.vote} | "
            f"Submission: {vote.submission_id} | "
            f"Member: {user.emirates_id}",
            extra={
                'submission_id': vote.submission_id,
                'member_id': vote.member_id,
                'vote': vote.vote,
                'user_id': user.id,
            }
        )

    @staticmethod
    def log_meeting_status(meeting, user, old_status: str):
        """Log a meeting status change"""
        logger.info(
            f"Meeting {meeting.meeting_code}: {old_status} -> {meeting.status} | "
            f"Quorum met: {meeting.quorum_met} | "
            f"By: {getattr(user, 'emirates_id', 'system')}",
            extra={
                'meeting_id': meeting.pk,
                'committee_id': meeting.committee_id,
                'status': meeting.status,
            }
        )

    @staticmethod
    def log_permission_denied(user, committee, action: str):
        """Log a rejected committee action"""
        logger.warning(
            f"Committee permission denied: {action} | "
            f"Committee: {committee.code} | "
            f"User: {user.emirates_id}",
            extra={
                'committee_id': committee.pk,
                'action': action,
                'user_id': user.id,
            }
        )
