"""
Database Module for the Niche Growth Dashboard

This module handles all database connections and operations. It implements the
GrowthStorage protocol against SQL Server through pyodbc: users, tracked
creators, ingested posts, post analyses, niche insights and generated posts.
"""

import json
import dataclasses
from typing import Optional, List, Dict, Any

import pandas as pd
import pyodbc

from config import settings
from data.models import (
    User, TrackedCreator, Post, PostAnalysis, NicheInsight, GeneratedPost,
    Platform, PostType, HookType, Sentiment, InsightType
)
from utils.exceptions import DatabaseConnectionError, QueryError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

POST_COLUMNS = """
    p.[Post_ID], p.[Tracked_Creator_ID], p.[Platform], p.[External_ID], p.[Post_Type],
    p.[Caption], p.[Media_URL], p.[Thumbnail_URL], p.[Likes], p.[Comments], p.[Shares],
    p.[Views], p.[Engagement_Rate], p.[Posted_At]
"""

ANALYSIS_COLUMNS = """
    a.[Post_Analysis_ID], a.[Hook_Type], a.[Content_Format], a.[Topic], a.[Why_It_Worked],
    a.[Sentiment], a.[Key_Takeaways], a.[Created_At] AS [Analysis_Created_At]
"""


def _clean(value: Any) -> Any:
    """Turn pandas/ODBC missing markers (None, NaN, NaT) into None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _load_json_list(value: Any) -> List[str]:
    value = _clean(value)
    if not value:
        return []
    try:
        loaded = json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed JSON list column: {value!r}")
        return []
    return [str(item) for item in loaded] if isinstance(loaded, list) else []


class DatabaseConnection:
    """Database connection manager and GrowthStorage implementation."""

    def __init__(self, connection_string: Optional[str] = None):
        """
        Initialize the database connection.

        Args:
            connection_string: ODBC connection string (defaults to settings.DB_CONNECTION_STRING).
        """
        self.conn = None
        self.connection_string = connection_string
        pyodbc.pooling = False

    # =========================================================================
    # Connection management
    # =========================================================================

    def connect(self) -> bool:
        """
        Establish a connection to the database.

        Returns:
            bool: True if connection was successful, False otherwise.
        """
        try:
            self.conn = pyodbc.connect(self.connection_string or settings.DB_CONNECTION_STRING)
            self.conn.setdecoding(pyodbc.SQL_CHAR, encoding='utf-8')
            logger.info("Successfully connected to database")
            return True
        except pyodbc.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            self.conn = None
            return False

    def close(self) -> None:
        """Close the database connection."""
        if not self.conn:
            return
        try:
            self.conn.close()
            logger.info("Database connection closed")
        except pyodbc.Error as e:
            logger.error(f"Error closing database connection: {e}")
        finally:
            self.conn = None

    def _require_connection(self):
        if not self.conn and not self.connect():
            raise DatabaseConnectionError("Could not connect to database")
        return self.conn

    def _rollback(self) -> None:
        try:
            self.conn.rollback()
        except pyodbc.Error as e:
            logger.error(f"Rollback failed: {e}")

    def execute_query(self, query: str, params: Optional[tuple] = None, commit: bool = True) -> List[Dict]:
        """
        Execute a SQL query and return the results.

        Args:
            query: The SQL query to execute.
            params: Query parameters (optional).
            commit: Commit after the statement (rows are fetched first).

        Returns:
            List[Dict]: Result rows as dictionaries (empty for statements without results).

        Raises:
            DatabaseConnectionError: If no connection can be established.
            QueryError: If the statement fails; the transaction is rolled back.
        """
        conn = self._require_connection()

        try:
            cursor = conn.cursor()
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)

            results = []
            # Check if this statement produced a result set
            if cursor.description:
                columns = [column[0] for column in cursor.description]
                results = [dict(zip(columns, row)) for row in cursor.fetchall()]

            if commit:
                conn.commit()
            return results

        except pyodbc.Error as e:
            logger.error(f"Error executing query: {e}")
            self._rollback()
            raise QueryError(str(e)) from e

    def initialize_schema(self, schema_file: Optional[str] = None) -> None:
        """Create any missing tables from data/schema.sql."""
        with open(schema_file or settings.SCHEMA_FILE, encoding="utf-8") as f:
            script = f.read()
        self.execute_query(script)
        logger.info("Database schema initialized")

    # =========================================================================
    # Row mapping
    # =========================================================================

    @staticmethod
    def _row_to_user(row: Dict[str, Any]) -> User:
        return User(
            id=row['User_ID'],
            niche=_clean(row.get('Niche')),
            platforms=_load_json_list(row.get('Platforms')),
            onboarded=bool(row.get('Onboarded')),
            social_handle=_clean(row.get('Social_Handle')),
            email=_clean(row.get('Email')),
            name=_clean(row.get('Name')),
        )

    @staticmethod
    def _row_to_analysis(row: Dict[str, Any]) -> Optional[PostAnalysis]:
        analysis_id = _clean(row.get('Post_Analysis_ID'))
        if analysis_id is None:
            return None
        return PostAnalysis(
            id=int(analysis_id),
            post_id=int(row['Post_ID']),
            hook_type=HookType.from_value(row.get('Hook_Type')),
            content_format=_clean(row.get('Content_Format')) or "",
            topic=_clean(row.get('Topic')) or "",
            why_it_worked=_clean(row.get('Why_It_Worked')) or "",
            sentiment=Sentiment.from_value(row.get('Sentiment')),
            key_takeaways=_load_json_list(row.get('Key_Takeaways')),
            created_at=_clean(row.get('Analysis_Created_At')),
        )

    @classmethod
    def _row_to_post(cls, row: Dict[str, Any]) -> Post:
        return Post(
            id=int(row['Post_ID']),
            creator_id=int(row['Tracked_Creator_ID']),
            platform=Platform.from_value(row['Platform']),
            external_id=row['External_ID'],
            post_type=PostType.from_value(row['Post_Type']) or PostType.STATIC,
            caption=_clean(row.get('Caption')) or "",
            media_url=_clean(row.get('Media_URL')) or "",
            thumbnail_url=_clean(row.get('Thumbnail_URL')) or "",
            likes=int(row.get('Likes') or 0),
            comments=int(row.get('Comments') or 0),
            shares=int(row.get('Shares') or 0),
            views=int(row.get('Views') or 0),
            engagement_rate=float(row.get('Engagement_Rate') or 0.0),
            posted_at=_clean(row.get('Posted_At')),
            analysis=cls._row_to_analysis(row),
        )

    @staticmethod
    def _row_to_creator(row: Dict[str, Any]) -> TrackedCreator:
        return TrackedCreator(
            id=int(row['Tracked_Creator_ID']),
            user_id=row['User_ID'],
            platform=Platform.from_value(row['Platform']),
            handle=row['Handle'],
            display_name=_clean(row.get('Display_Name')) or "",
            follower_count=int(_clean(row.get('Follower_Count')) or 0),
            bio=_clean(row.get('Bio')) or "",
            avatar_url=_clean(row.get('Avatar_URL')) or "",
            cid=_clean(row.get('Creator_CID')),
            last_synced=_clean(row.get('Last_Synced')),
            created_at=_clean(row.get('Created_At')),
        )

    @staticmethod
    def _row_to_insight(row: Dict[str, Any]) -> NicheInsight:
        return NicheInsight(
            id=row['Niche_Insight_ID'],
            user_id=row['User_ID'],
            insight_type=InsightType.from_value(row['Insight_Type']),
            insight_text=row['Insight_Text'],
            data_points=int(row.get('Data_Points') or 0),
            generated_at=row.get('Generated_At'),
        )

    @staticmethod
    def _row_to_generated_post(row: Dict[str, Any]) -> GeneratedPost:
        return GeneratedPost(
            id=row['Generated_Post_ID'],
            user_id=row['User_ID'],
            platform=row['Platform'],
            content_format=row.get('Content_Format'),
            caption=row['Caption'],
            hashtags=_load_json_list(row.get('Hashtags')),
            format_tips=row.get('Format_Tips') or "",
            posting_tips=row.get('Posting_Tips') or "",
            topic=row.get('Topic'),
            generated_at=row.get('Generated_At'),
        )

    # =========================================================================
    # Users
    # =========================================================================

    def get_user(self, user_id: str) -> Optional[User]:
        query = """
        SELECT [User_ID], [Email], [Name], [Niche], [Platforms], [Social_Handle], [Onboarded]
        FROM [dbo].[tbl_User]
        WHERE [User_ID] = ?
        """
        rows = self.execute_query(query, (user_id,), commit=False)
        return self._row_to_user(rows[0]) if rows else None

    def update_user_onboarding(self, user_id: str, niche: str, platforms: List[str],
                               social_handle: Optional[str]) -> User:
        query = """
        UPDATE [dbo].[tbl_User]
        SET [Niche] = ?,
            [Platforms] = ?,
            [Social_Handle] = ?,
            [Onboarded] = 1
        OUTPUT INSERTED.[User_ID], INSERTED.[Email], INSERTED.[Name], INSERTED.[Niche],
               INSERTED.[Platforms], INSERTED.[Social_Handle], INSERTED.[Onboarded]
        WHERE [User_ID] = ?
        """
        rows = self.execute_query(query, (niche, json.dumps(platforms), social_handle, user_id))
        if not rows:
            raise NotFoundError(f"User {user_id} not found")
        logger.info(f"Saved onboarding for user {user_id}: niche={niche!r}, platforms={platforms}")
        return self._row_to_user(rows[0])

    # =========================================================================
    # Tracked creators
    # =========================================================================

    def upsert_tracked_creator(self, creator: TrackedCreator) -> TrackedCreator:
        query = """
        MERGE [dbo].[tbl_Tracked_Creator] WITH (HOLDLOCK) AS target
        USING (SELECT ? AS [User_ID], ? AS [Platform], ? AS [Handle]) AS source
        ON target.[User_ID] = source.[User_ID]
           AND target.[Platform] = source.[Platform]
           AND target.[Handle] = source.[Handle]
        WHEN MATCHED THEN
            UPDATE SET [Display_Name] = ?,
                       [Follower_Count] = ?,
                       [Bio] = ?,
                       [Avatar_URL] = ?,
                       [Creator_CID] = COALESCE(?, target.[Creator_CID])
        WHEN NOT MATCHED THEN
            INSERT ([User_ID], [Platform], [Handle], [Display_Name], [Follower_Count],
                    [Bio], [Avatar_URL], [Creator_CID])
            VALUES (source.[User_ID], source.[Platform], source.[Handle], ?, ?, ?, ?, ?)
        OUTPUT INSERTED.[Tracked_Creator_ID], INSERTED.[Creator_CID],
               INSERTED.[Last_Synced], INSERTED.[Created_At];
        """
        profile = (creator.display_name, creator.follower_count, creator.bio,
                   creator.avatar_url, creator.cid)
        params = (creator.user_id, str(creator.platform), creator.handle) + profile + profile
        rows = self.execute_query(query, params)
        if not rows:
            raise QueryError(f"Upsert of tracked creator {creator.platform}/{creator.handle} returned no row")
        row = rows[0]
        return dataclasses.replace(
            creator,
            id=int(row['Tracked_Creator_ID']),
            cid=row.get('Creator_CID'),
            last_synced=row.get('Last_Synced'),
            created_at=row.get('Created_At'),
        )

    def mark_creator_synced(self, creator_id: int) -> None:
        query = """
        UPDATE [dbo].[tbl_Tracked_Creator]
        SET [Last_Synced] = SYSUTCDATETIME()
        WHERE [Tracked_Creator_ID] = ?
        """
        self.execute_query(query, (creator_id,))

    def delete_tracked_creator(self, creator_id: int) -> bool:
        query = """
        DELETE FROM [dbo].[tbl_Tracked_Creator]
        OUTPUT DELETED.[Tracked_Creator_ID]
        WHERE [Tracked_Creator_ID] = ?
        """
        rows = self.execute_query(query, (creator_id,))
        if rows:
            logger.info(f"Deleted tracked creator {creator_id}")
        return bool(rows)

    def get_tracked_creators(self, user_id: str, top_posts: int = 5) -> List[TrackedCreator]:
        """
        Load the user's tracked creators with their best posts.

        Creators come back newest first; each carries up to ``top_posts`` posts
        ordered by engagement rate, with analyses attached where present.
        """
        creators_query = """
        SELECT [Tracked_Creator_ID], [User_ID], [Platform], [Handle], [Display_Name],
               [Follower_Count], [Bio], [Avatar_URL], [Creator_CID], [Last_Synced], [Created_At]
        FROM [dbo].[tbl_Tracked_Creator]
        WHERE [User_ID] = ?
        ORDER BY [Created_At] DESC
        """
        posts_query = f"""
        SELECT {POST_COLUMNS}, {ANALYSIS_COLUMNS}
        FROM [dbo].[tbl_Post] p
        JOIN [dbo].[tbl_Tracked_Creator] c ON c.[Tracked_Creator_ID] = p.[Tracked_Creator_ID]
        LEFT JOIN [dbo].[tbl_Post_Analysis] a ON a.[Post_ID] = p.[Post_ID]
        WHERE c.[User_ID] = ?
        """
        conn = self._require_connection()
        try:
            creators_df = pd.read_sql(creators_query, conn, params=[user_id])
            posts_df = pd.read_sql(posts_query, conn, params=[user_id])
        except (pyodbc.Error, pd.errors.DatabaseError) as e:
            logger.error(f"Error loading tracked creators for user {user_id}: {e}")
            raise QueryError(str(e)) from e

        top_by_creator: Dict[int, List[Post]] = {}
        if not posts_df.empty:
            ranked = posts_df.sort_values(["Engagement_Rate", "Post_ID"], ascending=[False, True])
            top = ranked.groupby("Tracked_Creator_ID", sort=False).head(top_posts)
            for row in top.to_dict("records"):
                post = self._row_to_post(row)
                top_by_creator.setdefault(post.creator_id, []).append(post)

        creators = []
        for row in creators_df.to_dict("records"):
            creator = self._row_to_creator(row)
            creator.posts = top_by_creator.get(creator.id, [])
            creators.append(creator)
        return creators

    # =========================================================================
    # Posts and analyses
    # =========================================================================

    def upsert_post(self, post: Post) -> Post:
        query = """
        MERGE [dbo].[tbl_Post] WITH (HOLDLOCK) AS target
        USING (SELECT ? AS [Platform], ? AS [External_ID]) AS source
        ON target.[Platform] = source.[Platform] AND target.[External_ID] = source.[External_ID]
        WHEN MATCHED THEN
            UPDATE SET [Likes] = ?,
                       [Comments] = ?,
                       [Shares] = ?,
                       [Views] = ?,
                       [Engagement_Rate] = ?
        WHEN NOT MATCHED THEN
            INSERT ([Tracked_Creator_ID], [Platform], [External_ID], [Post_Type], [Caption],
                    [Media_URL], [Thumbnail_URL], [Likes], [Comments], [Shares], [Views],
                    [Engagement_Rate], [Posted_At])
            VALUES (?, source.[Platform], source.[External_ID], ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        OUTPUT INSERTED.[Post_ID];
        """
        counts = (post.likes, post.comments, post.shares, post.views, post.engagement_rate)
        params = (
            (str(post.platform), post.external_id)
            + counts
            + (post.creator_id, str(post.post_type), post.caption, post.media_url,
               post.thumbnail_url)
            + counts
            + (post.posted_at,)
        )
        rows = self.execute_query(query, params)
        if not rows:
            raise QueryError(f"Upsert of post {post.platform}/{post.external_id} returned no row")
        return dataclasses.replace(post, id=int(rows[0]['Post_ID']))

    def get_unanalyzed_posts(self, user_id: str, limit: int) -> List[Post]:
        query = f"""
        SELECT TOP (?) {POST_COLUMNS}
        FROM [dbo].[tbl_Post] p
        JOIN [dbo].[tbl_Tracked_Creator] c ON c.[Tracked_Creator_ID] = p.[Tracked_Creator_ID]
        LEFT JOIN [dbo].[tbl_Post_Analysis] a ON a.[Post_ID] = p.[Post_ID]
        WHERE c.[User_ID] = ?
          AND a.[Post_Analysis_ID] IS NULL
        ORDER BY p.[Post_ID]
        """
        rows = self.execute_query(query, (limit, user_id), commit=False)
        return [self._row_to_post(row) for row in rows]

    def get_analyzed_posts(self, user_id: str, limit: int) -> List[Post]:
        query = f"""
        SELECT TOP (?) {POST_COLUMNS}, {ANALYSIS_COLUMNS}
        FROM [dbo].[tbl_Post] p
        JOIN [dbo].[tbl_Tracked_Creator] c ON c.[Tracked_Creator_ID] = p.[Tracked_Creator_ID]
        JOIN [dbo].[tbl_Post_Analysis] a ON a.[Post_ID] = p.[Post_ID]
        WHERE c.[User_ID] = ?
        ORDER BY p.[Engagement_Rate] DESC, p.[Post_ID]
        """
        rows = self.execute_query(query, (limit, user_id), commit=False)
        return [self._row_to_post(row) for row in rows]

    def insert_post_analysis(self, analysis: PostAnalysis) -> PostAnalysis:
        query = """
        INSERT INTO [dbo].[tbl_Post_Analysis]
            ([Post_ID], [Hook_Type], [Content_Format], [Topic], [Why_It_Worked],
             [Sentiment], [Key_Takeaways])
        OUTPUT INSERTED.[Post_Analysis_ID], INSERTED.[Created_At]
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            analysis.post_id,
            str(analysis.hook_type),
            analysis.content_format,
            analysis.topic,
            analysis.why_it_worked,
            str(analysis.sentiment),
            json.dumps(analysis.key_takeaways),
        )
        rows = self.execute_query(query, params)
        row = rows[0] if rows else {}
        return dataclasses.replace(
            analysis,
            id=row.get('Post_Analysis_ID'),
            created_at=row.get('Created_At'),
        )

    # =========================================================================
    # Niche insights
    # =========================================================================

    def replace_niche_insights(self, user_id: str, insights: List[NicheInsight]) -> int:
        """
        Swap the user's insight set in a single transaction.

        The delete and the inserts are committed together; on any failure the
        transaction is rolled back so the previous insights stay in place.
        """
        conn = self._require_connection()
        delete_query = "DELETE FROM [dbo].[tbl_Niche_Insight] WHERE [User_ID] = ?"
        insert_query = """
        INSERT INTO [dbo].[tbl_Niche_Insight] ([User_ID], [Insight_Type], [Insight_Text], [Data_Points])
        VALUES (?, ?, ?, ?)
        """
        try:
            cursor = conn.cursor()
            cursor.execute(delete_query, (user_id,))
            if insights:
                cursor.executemany(insert_query, [
                    (user_id, str(i.insight_type), i.insight_text, i.data_points)
                    for i in insights
                ])
            conn.commit()
        except pyodbc.Error as e:
            logger.error(f"Error replacing niche insights for user {user_id}: {e}")
            self._rollback()
            raise QueryError(str(e)) from e

        logger.info(f"Replaced niche insights for user {user_id} with {len(insights)} new rows")
        return len(insights)

    def get_niche_insights(self, user_id: str, limit: Optional[int] = None) -> List[NicheInsight]:
        top = "TOP (?)" if limit else ""
        query = f"""
        SELECT {top} [Niche_Insight_ID], [User_ID], [Insight_Type], [Insight_Text],
               [Data_Points], [Generated_At]
        FROM [dbo].[tbl_Niche_Insight]
        WHERE [User_ID] = ?
        ORDER BY [Generated_At] DESC, [Niche_Insight_ID] DESC
        """
        params = (limit, user_id) if limit else (user_id,)
        rows = self.execute_query(query, params, commit=False)
        return [self._row_to_insight(row) for row in rows]

    # =========================================================================
    # Generated posts
    # =========================================================================

    def insert_generated_post(self, post: GeneratedPost) -> GeneratedPost:
        query = """
        INSERT INTO [dbo].[tbl_Generated_Post]
            ([User_ID], [Platform], [Content_Format], [Caption], [Hashtags],
             [Format_Tips], [Posting_Tips], [Topic])
        OUTPUT INSERTED.[Generated_Post_ID], INSERTED.[Generated_At]
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            post.user_id,
            post.platform,
            post.content_format,
            post.caption,
            json.dumps(post.hashtags),
            post.format_tips,
            post.posting_tips,
            post.topic,
        )
        rows = self.execute_query(query, params)
        row = rows[0] if rows else {}
        return dataclasses.replace(
            post,
            id=row.get('Generated_Post_ID'),
            generated_at=row.get('Generated_At'),
        )

    def get_generated_posts(self, user_id: str, limit: int = 20) -> List[GeneratedPost]:
        query = """
        SELECT TOP (?) [Generated_Post_ID], [User_ID], [Platform], [Content_Format], [Caption],
               [Hashtags], [Format_Tips], [Posting_Tips], [Topic], [Generated_At]
        FROM [dbo].[tbl_Generated_Post]
        WHERE [User_ID] = ?
        ORDER BY [Generated_At] DESC, [Generated_Post_ID] DESC
        """
        rows = self.execute_query(query, (limit, user_id), commit=False)
        return [self._row_to_generated_post(row) for row in rows]


# Create a default database instance for use throughout the application
db = DatabaseConnection()
