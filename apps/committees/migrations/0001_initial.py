# Generated manually on 2026-10-12
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('beneficiaries', '0001_initial'),
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Committee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.CharField(max_length=20, unique=True, verbose_name='Committee Code')),
                ('name_en', models.CharField(max_length=200, verbose_name='Name (English)')),
                ('name_ar', models.CharField(blank=True, max_length=200, verbose_name='Name (Arabic)')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('committee_type', models.CharField(choices=[('ASSESSMENT_REVIEW', 'Assessment Review'), ('FUNDING', 'Funding'), ('PROJECT_APPROVAL', 'Project Approval'), ('GENERAL', 'General')], default='GENERAL', max_length=20, verbose_name='Committee Type')),
                ('formation_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Formation Date')),
                ('dissolution_date', models.DateField(blank=True, null=True, verbose_name='Dissolution Date')),
                ('meeting_frequency', models.CharField(choices=[('WEEKLY', 'Weekly'), ('BIWEEKLY', 'Bi-weekly'), ('MONTHLY', 'Monthly'), ('QUARTERLY', 'Quarterly'), ('AD_HOC', 'As Needed')], default='MONTHLY', max_length=20, verbose_name='Meeting Frequency')),
                ('quorum_requirement', models.PositiveSmallIntegerField(default=3, help_text='Minimum number of voting members present for decisions.', verbose_name='Quorum Requirement')),
                ('chairperson', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='chaired_committees', to=settings.AUTH_USER_MODEL, verbose_name='Chairperson')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committee_records', to='clients.clienttype', verbose_name='Client Type')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committee_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committee_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Committee',
                'verbose_name_plural': 'Committees',
                'ordering': ['name_en'],
            },
        ),
        migrations.CreateModel(
            name='CommitteeMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('role_in_committee', models.CharField(choices=[('CHAIR', 'Chair'), ('SECRETARY', 'Secretary'), ('MEMBER', 'Member')], default='MEMBER', max_length=20, verbose_name='Role in Committee')),
                ('position', models.CharField(blank=True, max_length=100, verbose_name='Position')),
                ('department', models.CharField(blank=True, max_length=100, verbose_name='Department')),
                ('join_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Join Date')),
                ('end_date', models.DateField(blank=True, null=True, verbose_name='End Date')),
                ('voting_rights', models.BooleanField(default=True, verbose_name='Voting Rights')),
                ('is_active', models.BooleanField(default=True, verbose_name='Is Active')),
                ('committee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='committees.committee', verbose_name='Committee')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='committee_memberships', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Committee Member',
                'verbose_name_plural': 'Committee Members',
                'ordering': ['committee', 'role_in_committee', 'user__first_name'],
                'unique_together': {('committee', 'user')},
            },
        ),
        migrations.CreateModel(
            name='CommitteeMeeting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('meeting_code', models.CharField(editable=False, max_length=40, unique=True, verbose_name='Meeting Code')),
                ('title', models.CharField(max_length=200, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('meeting_date', models.DateField(verbose_name='Meeting Date')),
                ('start_time', models.TimeField(verbose_name='Start Time')),
                ('end_time', models.TimeField(blank=True, null=True, verbose_name='End Time')),
                ('location', models.CharField(blank=True, max_length=200, verbose_name='Location')),
                ('is_virtual', models.BooleanField(default=False, verbose_name='Virtual Meeting')),
                ('meeting_link', models.URLField(blank=True, verbose_name='Meeting Link')),
                ('status', models.CharField(choices=[('SCHEDULED', 'Scheduled'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='SCHEDULED', max_length=20, verbose_name='Status')),
                ('minutes', models.TextField(blank=True, verbose_name='Minutes')),
                ('quorum_met', models.BooleanField(blank=True, null=True, verbose_name='Quorum Met')),
                ('next_meeting_date', models.DateField(blank=True, null=True, verbose_name='Next Meeting Date')),
                ('attendees', models.ManyToManyField(blank=True, related_name='attended_meetings', to=settings.AUTH_USER_MODEL, verbose_name='Attendees')),
                ('committee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meetings', to='committees.committee', verbose_name='Committee')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committeemeeting_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committeemeeting_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Committee Meeting',
                'verbose_name_plural': 'Committee Meetings',
                'ordering': ['-meeting_date', '-start_time'],
            },
        ),
        migrations.CreateModel(
            name='CommitteeSubmission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('title', models.CharField(max_length=200, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('submission_type', models.CharField(choices=[('ASSESSMENT', 'Assessment'), ('BUDGET', 'Budget'), ('PROJECT', 'Project'), ('OTHER', 'Other')], default='OTHER', max_length=20, verbose_name='Submission Type')),
                ('priority', models.CharField(choices=[('HIGH', 'High'), ('MEDIUM', 'Medium'), ('LOW', 'Low')], default='MEDIUM', max_length=10, verbose_name='Priority')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('DEFERRED', 'Deferred')], default='PENDING', max_length=20, verbose_name='Status')),
                ('submission_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Submission Date')),
                ('due_date', models.DateField(blank=True, null=True, verbose_name='Due Date')),
                ('related_entity_type', models.CharField(blank=True, max_length=50, verbose_name='Related Entity Type')),
                ('related_entity_id', models.CharField(blank=True, max_length=50, verbose_name='Related Entity ID')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('beneficiary', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committee_submissions', to='beneficiaries.beneficiary', verbose_name='Beneficiary')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committeesubmission_records', to='clients.clienttype', verbose_name='Client Type')),
                ('committee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submissions', to='committees.committee', verbose_name='Committee')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committeesubmission_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('submitted_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='committee_submissions', to=settings.AUTH_USER_MODEL, verbose_name='Submitted By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='committeesubmission_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Committee Submission',
                'verbose_name_plural': 'Committee Submissions',
                'ordering': ['-submission_date'],
                'indexes': [
                    models.Index(fields=['status', 'priority'], name='committee_sub_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AgendaItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('title', models.CharField(max_length=200, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('duration_minutes', models.PositiveSmallIntegerField(default=15, verbose_name='Duration (minutes)')),
                ('order', models.PositiveSmallIntegerField(default=0, verbose_name='Order')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('DISCUSSED', 'Discussed'), ('DEFERRED', 'Deferred')], default='PENDING', max_length=20, verbose_name='Status')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('meeting', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='agenda_items', to='committees.committeemeeting', verbose_name='Meeting')),
                ('presenter', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='presented_agenda_items', to=settings.AUTH_USER_MODEL, verbose_name='Presenter')),
                ('submission', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='agenda_items', to='committees.committeesubmission', verbose_name='Submission')),
            ],
            options={
                'verbose_name': 'Agenda Item',
                'verbose_name_plural': 'Agenda Items',
                'ordering': ['meeting', 'order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='CommitteeDecision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('title', models.CharField(max_length=200, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('decision', models.CharField(choices=[('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('DEFERRED', 'Deferred'), ('MODIFIED', 'Approved with Modifications')], max_length=20, verbose_name='Decision')),
                ('decision_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Decision Date')),
                ('rationale', models.TextField(blank=True, verbose_name='Rationale')),
                ('conditions', models.TextField(blank=True, verbose_name='Conditions')),
                ('votes_for', models.PositiveSmallIntegerField(default=0, verbose_name='Votes For')),
                ('votes_against', models.PositiveSmallIntegerField(default=0, verbose_name='Votes Against')),
                ('votes_abstain', models.PositiveSmallIntegerField(default=0, verbose_name='Abstentions')),
                ('follow_up_required', models.BooleanField(default=False, verbose_name='Follow-up Required')),
                ('follow_up_date', models.DateField(blank=True, null=True, verbose_name='Follow-up Date')),
                ('next_review_date', models.DateField(blank=True, null=True, verbose_name='Next Review Date')),
                ('committee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='decisions', to='committees.committee', verbose_name='Committee')),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='committee_decisions', to=settings.AUTH_USER_MODEL, verbose_name='Decided By')),
                ('follow_up_assignee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_decision_follow_ups', to=settings.AUTH_USER_MODEL, verbose_name='Follow-up Assignee')),
                ('meeting', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='decisions', to='committees.committeemeeting', verbose_name='Meeting')),
                ('submission', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='decisions', to='committees.committeesubmission', verbose_name='Submission')),
            ],
            options={
                'verbose_name': 'Committee Decision',
                'verbose_name_plural': 'Committee Decisions',
                'ordering': ['-decision_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SubmissionVote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('vote', models.CharField(choices=[('FOR', 'For'), ('AGAINST', 'Against'), ('ABSTAIN', 'Abstain')], max_length=10, verbose_name='Vote')),
                ('comments', models.TextField(blank=True, verbose_name='Comments')),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='votes', to='committees.committeemember', verbose_name='Member')),
                ('submission', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='votes', to='committees.committeesubmission', verbose_name='Submission')),
            ],
            options={
                'verbose_name': 'Submission Vote',
                'verbose_name_plural': 'Submission Votes',
                'unique_together': {('submission', 'member')},
            },
        ),
    ]
